from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PendingSyncItemViewSet, offline_status

router = DefaultRouter()
router.register(r"pending", PendingSyncItemViewSet, basename="pending-sync")

urlpatterns = [
    path("", include(router.urls)),
    path("status/", offline_status, name="offline-status"),
]
