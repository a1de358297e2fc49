from rest_framework import serializers
from .models import PromEvent, PromQuote
from .services import NO_BADGES


class PromEventSerializer(serializers.ModelSerializer):
    """Prom event with its quote count"""

    quote_count = serializers.IntegerField(source="quotes.count", read_only=True)

    class Meta:
        model = PromEvent
        fields = [
            "id",
            "title",
            "description",
            "event_date",
            "venue_name",
            "total_budget",
            "student_count",
            "status",
            "quote_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "quote_count", "created_at", "updated_at"]

    def validate_title(self, value):
        if len(value.strip()) < 2:
            raise serializers.ValidationError("Title must be at least 2 characters.")
        return value.strip()


class PromQuoteSerializer(serializers.ModelSerializer):
    """
    Vendor quote with its comparison badges

    Context:
        badges: {quote id: QuoteBadges} computed over the whole event
        can_edit: whether the caller may see vendor contact details and admin notes
    """

    PRIVATE_FIELDS = ("vendor_phone", "vendor_email", "admin_notes")

    prom_id = serializers.UUIDField(source="prom.id", read_only=True)
    badges = serializers.SerializerMethodField()

    class Meta:
        model = PromQuote
        fields = [
            "id",
            "prom_id",
            "vendor_name",
            "vendor_contact_name",
            "vendor_phone",
            "vendor_email",
            "category",
            "price_total",
            "price_per_participant",
            "availability_status",
            "rating",
            "pros",
            "cons",
            "admin_notes",
            "is_finalist",
            "display_order",
            "badges",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "prom_id", "badges", "created_at", "updated_at"]

    def get_badges(self, obj):
        return self.context.get("badges", {}).get(obj.id, NO_BADGES).as_dict()

    def validate_vendor_name(self, value):
        if len(value.strip()) < 2:
            raise serializers.ValidationError("Vendor name must be at least 2 characters.")
        return value.strip()

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not self.context.get("can_edit", False):
            for name in self.PRIVATE_FIELDS:
                data.pop(name, None)
        return data


class CategorySummarySerializer(serializers.Serializer):
    category = serializers.CharField()
    count = serializers.IntegerField()
    min_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    max_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    avg_price = serializers.DecimalField(max_digits=12, decimal_places=0)
    cheapest_ids = serializers.ListField(child=serializers.UUIDField())
    highest_rated_ids = serializers.ListField(child=serializers.UUIDField())
    best_value_ids = serializers.ListField(child=serializers.UUIDField())
