import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django_ratelimit.decorators import ratelimit
from rest_framework import status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import SAFE_METHODS, AllowAny
from rest_framework.response import Response

from apps.core.permissions import IsEditorOrReadOnly, user_can_edit
from .models import PromEvent, PromQuote
from .serializers import CategorySummarySerializer, PromEventSerializer, PromQuoteSerializer
from .services import QuoteService

logger = logging.getLogger(__name__)


def get_prom_or_404(prom_pk):
    try:
        return PromEvent.objects.get(id=prom_pk)
    except (PromEvent.DoesNotExist, DjangoValidationError):
        raise NotFound("Prom event not found")


class PromEventViewSet(viewsets.ModelViewSet):
    """
    Prom planning events
    Anyone can read; admins and editors write
    """

    serializer_class = PromEventSerializer
    permission_classes = [IsEditorOrReadOnly]

    def get_queryset(self):
        queryset = PromEvent.objects.all()
        status_filter = self.request.query_params.get("status")
        if status_filter and status_filter != "all":
            queryset = queryset.filter(status=status_filter)
        return queryset

    def perform_create(self, serializer):
        prom = serializer.save()
        logger.info(f"Created prom event {prom.id} by {self.request.user.email}")


class PromQuoteViewSet(viewsets.ModelViewSet):
    """
    Vendor quotes of one prom event, each with its comparison badges

    GET /api/v1/prom/<prom_id>/quotes/?category=dj&finalists=true

    Filters narrow the listing only; badges are scored over every quote of the event.
    Vendor phone/email and admin notes are hidden from non-editors.
    """

    serializer_class = PromQuoteSerializer
    permission_classes = [IsEditorOrReadOnly]
    pagination_class = None

    def get_prom(self):
        if not hasattr(self, "_prom"):
            self._prom = get_prom_or_404(self.kwargs["prom_pk"])
        return self._prom

    def get_queryset(self):
        queryset = PromQuote.objects.filter(prom=self.get_prom())

        category = self.request.query_params.get("category")
        if category and category != "all":
            queryset = queryset.filter(category=category)

        if self.request.query_params.get("finalists") == "true":
            queryset = queryset.filter(is_finalist=True)

        return queryset.order_by("display_order", "created_at")

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["can_edit"] = user_can_edit(self.request.user)
        if self.request.method in SAFE_METHODS:
            context["badges"] = QuoteService.badge_map(self.get_prom())
        return context

    def perform_create(self, serializer):
        quote = serializer.save(prom=self.get_prom())
        # a new quote can move its peers' badges, so rescore the event
        serializer.context["badges"] = QuoteService.badge_map(self.get_prom())
        logger.info(f"Added {quote.category} quote {quote.id} from {quote.vendor_name} to prom {quote.prom_id}")

    def perform_update(self, serializer):
        quote = serializer.save()
        serializer.context["badges"] = QuoteService.badge_map(self.get_prom())
        logger.info(f"Updated quote {quote.id}")

    def perform_destroy(self, instance):
        logger.info(f"Deleting quote {instance.id} from prom {instance.prom_id}")
        instance.delete()


@api_view(["GET"])
@permission_classes([AllowAny])
@ratelimit(key="ip", rate=settings.QUOTE_COMPARISON_RATE, method="GET", block=False)
def quote_comparison(request, prom_pk):
    """
    Per-category price summary and badge holders for a prom event
    Public (shared with parents), rate limited per client IP

    GET /api/v1/prom/<prom_id>/quotes/comparison/
    """
    if getattr(request, "limited", False):
        return Response(
            {"success": False, "error": "Rate limit exceeded. Please try again later.", "field": None},
            status=status.HTTP_429_TOO_MANY_REQUESTS,
        )

    prom = get_prom_or_404(prom_pk)
    summaries = QuoteService.comparison(prom)
    return Response(
        {
            "prom_id": str(prom.id),
            "categories": CategorySummarySerializer(summaries, many=True).data,
        }
    )
