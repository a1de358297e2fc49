from asgiref.sync import async_to_sync
from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.permissions import IsEditor
from .models import PendingSyncItem
from .serializers import OfflineStatusSerializer, PendingSyncItemSerializer
from .storage import open_offline_storage


class PendingSyncItemViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Queue of mutations waiting for replay, oldest first
    Read-only - items are queued and removed through OfflineStorage
    """

    serializer_class = PendingSyncItemSerializer
    permission_classes = [IsEditor]

    def get_queryset(self):
        return PendingSyncItem.objects.in_replay_order()


_storage = None


def get_storage():
    """Storage handle for request handlers, opened on first use and reused after"""
    global _storage
    if _storage is None:
        _storage = async_to_sync(open_offline_storage)()
    return _storage


@api_view(["GET"])
@permission_classes([IsEditor])
def offline_status(request):
    """
    Row counts of the offline store

    GET /api/v1/offline/status/
    """
    storage = get_storage()
    counts = async_to_sync(storage.status)()
    return Response(OfflineStatusSerializer(counts).data)
