from rest_framework import serializers
from .models import PendingSyncItem


class PendingSyncItemSerializer(serializers.ModelSerializer):
    """
    Queued mutation, as exposed for inspection (listing only)
    """

    class Meta:
        model = PendingSyncItem
        fields = [
            "id",
            "url",
            "method",
            "headers",
            "data",
            "timestamp",
            "retry_count",
        ]
        read_only_fields = fields


class OfflineStatusSerializer(serializers.Serializer):
    pending_mutations = serializers.IntegerField()
    cache_entries = serializers.IntegerField()
    expired_cache_entries = serializers.IntegerField()
    partitions = serializers.DictField(child=serializers.IntegerField())
