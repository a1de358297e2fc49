from django.db import models
from django.utils import timezone


class PendingSyncQuerySet(models.QuerySet):
    def in_replay_order(self):
        """Enqueue order; timestamp is informational and never reorders the queue"""
        return self.order_by("id")


class PendingSyncItem(models.Model):
    """A mutation accepted while offline and not yet confirmed by the remote service"""

    METHOD_CHOICES = (
        ("POST", "POST"),
        ("PUT", "PUT"),
        ("PATCH", "PATCH"),
        ("DELETE", "DELETE"),
    )

    url = models.CharField(max_length=2048, db_index=True)
    method = models.CharField(max_length=10, choices=METHOD_CHOICES)
    headers = models.JSONField(default=dict)
    data = models.JSONField(null=True, blank=True)
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    retry_count = models.PositiveIntegerField(default=0)

    objects = PendingSyncQuerySet.as_manager()

    class Meta:
        db_table = "offline_pending_sync"
        ordering = ["id"]

    def __str__(self):
        return f"{self.method} {self.url} (retries: {self.retry_count})"


class CacheEntry(models.Model):
    key = models.CharField(max_length=512, primary_key=True)
    value = models.JSONField(null=True)
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    expires_at = models.DateTimeField(null=True, blank=True, db_index=True)  # null: never expires

    class Meta:
        db_table = "offline_cache"

    def __str__(self):
        return self.key

    def is_expired(self, now=None):
        if self.expires_at is None:
            return False
        return self.expires_at < (now or timezone.now())


class MirroredEntity(models.Model):
    """
    Local copy of a remote row, kept for offline list/detail display
    The remote id is normalised to a string so 5 and "5" are the same row
    """

    id = models.CharField(max_length=255, primary_key=True)
    data = models.JSONField()
    stored_at = models.DateTimeField(default=timezone.now)

    class Meta:
        abstract = True
        ordering = ["id"]

    def __str__(self):
        return f"{self.__class__.__name__} {self.id}"


class OfflineEvent(MirroredEntity):
    class Meta(MirroredEntity.Meta):
        db_table = "offline_events"


class OfflineTask(MirroredEntity):
    class Meta(MirroredEntity.Meta):
        db_table = "offline_tasks"


class OfflineProtocol(MirroredEntity):
    class Meta(MirroredEntity.Meta):
        db_table = "offline_protocols"


# Partitions are fixed here; adding one means a new model and a migration
ENTITY_PARTITIONS = {
    "events": OfflineEvent,
    "tasks": OfflineTask,
    "protocols": OfflineProtocol,
}
