"""
Local offline store: pending mutation queue, expiring cache, mirrored entities

The store is an explicit service object. Build it once at startup with
``await OfflineStorage.open()`` (or ``open_offline_storage()``) and hand it to
whoever needs it; nothing is opened at import time.

Every public operation is a coroutine running one logical operation inside its
own transaction. Failures propagate to the caller; retry policy for replaying
the queue belongs to the caller.
"""

import json
import logging
from collections.abc import Mapping
from contextlib import contextmanager
from datetime import timedelta
from functools import wraps

from asgiref.sync import sync_to_async
from django.conf import settings
from django.db import InterfaceError, OperationalError, connections, transaction
from django.utils import timezone
from django.utils.connection import ConnectionDoesNotExist

from .errors import PartitionNotFound, PendingMutationNotFound, SerializationFailure, StorageUnavailable
from .models import ENTITY_PARTITIONS, CacheEntry, MirroredEntity, PendingSyncItem

logger = logging.getLogger(__name__)

MUTATION_METHODS = {choice for choice, _ in PendingSyncItem.METHOD_CHOICES}

REQUIRED_TABLES = {
    PendingSyncItem._meta.db_table,
    CacheEntry._meta.db_table,
    *(model._meta.db_table for model in ENTITY_PARTITIONS.values()),
}

ENTITY_ID_MAX_LENGTH = MirroredEntity._meta.get_field("id").max_length


@contextmanager
def scoped_transaction(using):
    """
    Acquire a transaction, run one logical operation, commit
    Rolls back on the first error; connectivity failures surface as StorageUnavailable
    """
    try:
        with transaction.atomic(using=using):
            yield
    except (OperationalError, InterfaceError) as e:
        raise StorageUnavailable(f"Offline store unavailable: {e}") from e


def storage_operation(func):
    """
    Turn a blocking storage method into a coroutine running in its own scoped transaction
    """

    def run(self, *args, **kwargs):
        with scoped_transaction(self.using):
            return func(self, *args, **kwargs)

    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        return await sync_to_async(run)(self, *args, **kwargs)

    return wrapper


def ensure_serializable(value, what: str):
    """
    Only JSON-native values are stored; a Decimal, datetime or UUID would
    come back as a string, so they are refused instead
    """
    try:
        json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationFailure(f"Cannot store {what}: {e}") from e


def ttl_to_timedelta(ttl) -> timedelta:
    """Seconds (int/float) or a timedelta; must be positive"""
    delta = ttl if isinstance(ttl, timedelta) else timedelta(seconds=float(ttl))
    if delta <= timedelta(0):
        raise ValueError(f"Cache ttl must be positive, got {ttl!r}")
    return delta


class OfflineStorage:
    def __init__(self, using: str = "default", strict_partitions: bool = False, clock=None):
        self.using = using
        self.strict_partitions = strict_partitions
        self._clock = clock or timezone.now

    @classmethod
    async def open(cls, using: str = "default", strict_partitions: bool = False, clock=None):
        """
        Open the store, verifying the database is reachable and migrated

        Raises:
            StorageUnavailable: unknown alias, no connection, or missing tables
        """
        storage = cls(using=using, strict_partitions=strict_partitions, clock=clock)
        await sync_to_async(storage._check_available)()
        logger.info(f"Offline storage opened on database '{using}'")
        return storage

    def _check_available(self):
        try:
            connection = connections[self.using]
        except ConnectionDoesNotExist as e:
            raise StorageUnavailable(f"Database alias '{self.using}' is not configured") from e

        try:
            connection.ensure_connection()
            with connection.cursor() as cursor:
                tables = set(connection.introspection.table_names(cursor))
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Offline storage failed to open: {e}")
            raise StorageUnavailable(f"Offline store unavailable: {e}") from e

        missing = sorted(REQUIRED_TABLES - tables)
        if missing:
            raise StorageUnavailable(f"Offline tables missing ({', '.join(missing)}); run migrations")

    def _now(self):
        return self._clock()

    @staticmethod
    def _queue_id(item_id):
        """Queue ids are integers; anything else can never match an item"""
        try:
            return int(item_id)
        except (TypeError, ValueError):
            return None

    # ------------------------------------------------------------------
    # Pending mutation queue
    # ------------------------------------------------------------------

    @storage_operation
    def enqueue_mutation(self, url: str, method: str, headers=None, data=None) -> int:
        """
        Queue a mutation made while offline; no network call is made

        Returns:
            id of the queued item, for removal after a successful replay
        """
        method = (method or "").upper()
        if method not in MUTATION_METHODS:
            raise ValueError(f"Unsupported mutation method: {method or '<empty>'}")

        headers = dict(headers or {})
        ensure_serializable(headers, "request headers")
        ensure_serializable(data, "request payload")

        item = PendingSyncItem.objects.using(self.using).create(
            url=url,
            method=method,
            headers=headers,
            data=data,
            timestamp=self._now(),
            retry_count=0,
        )
        logger.info(f"Queued pending mutation {item.id}: {method} {url}")
        return item.id

    @storage_operation
    def list_pending_mutations(self) -> list:
        """All queued items in replay order (oldest first)"""
        return list(PendingSyncItem.objects.using(self.using).in_replay_order())

    @storage_operation
    def remove_pending_mutation(self, item_id) -> bool:
        """Idempotent; returns False when the item was already gone"""
        queue_id = self._queue_id(item_id)
        if queue_id is None:
            logger.warning(f"Ignoring removal of malformed pending mutation id {item_id!r}")
            return False

        deleted, _ = PendingSyncItem.objects.using(self.using).filter(id=queue_id).delete()
        if not deleted:
            logger.warning(f"Pending mutation {item_id} already removed")
            return False
        logger.info(f"Removed pending mutation {item_id}")
        return True

    @storage_operation
    def increment_retry(self, item_id) -> PendingSyncItem:
        """
        Bump the retry counter of a queued item

        Raises:
            PendingMutationNotFound: the item no longer exists
        """
        queue_id = self._queue_id(item_id)
        if queue_id is None:
            raise PendingMutationNotFound(item_id)

        try:
            item = PendingSyncItem.objects.using(self.using).select_for_update().get(id=queue_id)
        except PendingSyncItem.DoesNotExist:
            raise PendingMutationNotFound(item_id) from None

        item.retry_count += 1
        item.save(update_fields=["retry_count"])
        logger.info(f"Pending mutation {item_id} retry count now {item.retry_count}")
        return item

    # ------------------------------------------------------------------
    # Expiring cache
    # ------------------------------------------------------------------

    @storage_operation
    def put_cache(self, key: str, value, ttl=None) -> None:
        """Upsert; without ttl the entry never expires on its own"""
        now = self._now()
        expires_at = now + ttl_to_timedelta(ttl) if ttl is not None else None
        ensure_serializable(value, f"cache value for '{key}'")

        CacheEntry.objects.using(self.using).update_or_create(
            key=key,
            defaults={"value": value, "timestamp": now, "expires_at": expires_at},
        )
        logger.debug(f"Cached '{key}' (expires {expires_at or 'never'})")

    @storage_operation
    def get_cache(self, key: str, default=None):
        """Value for key; an expired entry is deleted and reads as a miss"""
        try:
            entry = CacheEntry.objects.using(self.using).get(key=key)
        except CacheEntry.DoesNotExist:
            logger.debug(f"Cache MISS for '{key}'")
            return default

        if entry.is_expired(self._now()):
            entry.delete()
            logger.debug(f"Cache entry '{key}' expired at {entry.expires_at}; deleted")
            return default

        return entry.value

    @storage_operation
    def delete_cache(self, key: str) -> bool:
        deleted, _ = CacheEntry.objects.using(self.using).filter(key=key).delete()
        return bool(deleted)

    @storage_operation
    def sweep_expired_cache(self) -> int:
        """Delete every expired entry; returns how many were removed"""
        deleted, _ = CacheEntry.objects.using(self.using).filter(expires_at__lt=self._now()).delete()
        if deleted:
            logger.info(f"Swept {deleted} expired cache entries")
        return deleted

    # ------------------------------------------------------------------
    # Mirrored entity partitions
    # ------------------------------------------------------------------

    def supports_partition(self, partition: str) -> bool:
        """Capability query; partitions are fixed by the schema so no I/O is needed"""
        return partition in ENTITY_PARTITIONS

    def _partition_model(self, partition: str):
        model = ENTITY_PARTITIONS.get(partition)
        if model is None:
            if self.strict_partitions:
                raise PartitionNotFound(partition)
            logger.warning(f"Offline partition '{partition}' does not exist")
        return model

    @storage_operation
    def store_entity(self, partition: str, entity) -> None:
        model = self._partition_model(partition)
        if model is None:
            return None

        if not isinstance(entity, Mapping) or entity.get("id") in (None, ""):
            raise SerializationFailure(f"Entities stored in '{partition}' need an 'id'")

        document = dict(entity)
        entity_id = str(document["id"])
        if len(entity_id) > ENTITY_ID_MAX_LENGTH:
            raise SerializationFailure(
                f"Entity id in '{partition}' is longer than {ENTITY_ID_MAX_LENGTH} characters"
            )
        ensure_serializable(document, f"{partition} entity {entity_id}")

        model.objects.using(self.using).update_or_create(
            id=entity_id,
            defaults={"data": document, "stored_at": self._now()},
        )
        return None

    @storage_operation
    def get_entity(self, partition: str, entity_id):
        model = self._partition_model(partition)
        if model is None:
            return None

        row = model.objects.using(self.using).filter(id=str(entity_id)).first()
        return row.data if row else None

    @storage_operation
    def list_entities(self, partition: str) -> list:
        model = self._partition_model(partition)
        if model is None:
            return []
        return [row.data for row in model.objects.using(self.using).order_by("id")]

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    @storage_operation
    def clear_all(self) -> None:
        """Wipe every partition at once (logout/reset)"""
        counts = {
            PendingSyncItem._meta.db_table: PendingSyncItem.objects.using(self.using).all().delete()[0],
            CacheEntry._meta.db_table: CacheEntry.objects.using(self.using).all().delete()[0],
        }
        for model in ENTITY_PARTITIONS.values():
            counts[model._meta.db_table] = model.objects.using(self.using).all().delete()[0]

        logger.info(f"Cleared offline storage: {counts}")

    @storage_operation
    def status(self) -> dict:
        now = self._now()
        cache = CacheEntry.objects.using(self.using)
        return {
            "pending_mutations": PendingSyncItem.objects.using(self.using).count(),
            "cache_entries": cache.count(),
            "expired_cache_entries": cache.filter(expires_at__lt=now).count(),
            "partitions": {name: model.objects.using(self.using).count() for name, model in ENTITY_PARTITIONS.items()},
        }


async def open_offline_storage(**overrides) -> OfflineStorage:
    """Open the store with defaults from settings.OFFLINE_STORAGE"""
    options = getattr(settings, "OFFLINE_STORAGE", {})
    kwargs = {
        "using": options.get("DATABASE", "default"),
        "strict_partitions": options.get("STRICT_PARTITIONS", False),
    }
    kwargs.update(overrides)
    return await OfflineStorage.open(**kwargs)
