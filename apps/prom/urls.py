from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PromEventViewSet, PromQuoteViewSet, quote_comparison

router = DefaultRouter()
router.register(r"prom", PromEventViewSet, basename="prom")
router.register(r"prom/(?P<prom_pk>[^/.]+)/quotes", PromQuoteViewSet, basename="prom-quote")

urlpatterns = [
    # before the router so "comparison" is not taken for a quote id
    path("prom/<str:prom_pk>/quotes/comparison/", quote_comparison, name="prom-quote-comparison"),
    path("", include(router.urls)),
]
