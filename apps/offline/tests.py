"""
Tests for the offline store: pending mutation queue, expiring cache,
mirrored entity partitions, the HTTP surface and the maintenance commands
"""
import uuid
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.db import OperationalError
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status

from apps.core.test_utils import AuthenticatedAPIClient, FakeClock, TestDataFactory
from .errors import NotFound, PartitionNotFound, PendingMutationNotFound, SerializationFailure, StorageUnavailable
from .models import CacheEntry, OfflineEvent, OfflineTask, PendingSyncItem
from . import views as offline_views
from .storage import OfflineStorage, open_offline_storage, scoped_transaction


class PendingMutationQueueTests(TestCase):
    """Queue primitives"""

    def setUp(self):
        self.clock = FakeClock()
        self.storage = OfflineStorage(clock=self.clock)

    async def test_enqueue_returns_id_and_starts_without_retries(self):
        item_id = await self.storage.enqueue_mutation("/api/tasks", "post", {"Content-Type": "application/json"}, {"title": "Bake sale"})

        item = await PendingSyncItem.objects.aget(id=item_id)
        self.assertEqual(item.method, "POST")
        self.assertEqual(item.retry_count, 0)
        self.assertEqual(item.timestamp, self.clock.now)
        self.assertEqual(item.headers, {"Content-Type": "application/json"})
        self.assertEqual(item.data, {"title": "Bake sale"})

    async def test_pending_mutations_are_listed_oldest_first(self):
        first = await self.storage.enqueue_mutation("/api/events", "POST", data={"name": "A"})
        self.clock.advance(seconds=5)
        second = await self.storage.enqueue_mutation("/api/events/1", "PATCH", data={"name": "B"})
        self.clock.advance(seconds=5)
        third = await self.storage.enqueue_mutation("/api/events/1", "DELETE")

        pending = await self.storage.list_pending_mutations()

        self.assertEqual([item.id for item in pending], [first, second, third])

    async def test_same_timestamp_keeps_insertion_order(self):
        ids = [await self.storage.enqueue_mutation(f"/api/tasks/{n}", "PUT", data={"n": n}) for n in range(3)]

        pending = await self.storage.list_pending_mutations()

        self.assertEqual([item.id for item in pending], ids)

    async def test_clock_stepping_back_keeps_enqueue_order(self):
        first = await self.storage.enqueue_mutation("/api/events", "POST", data={"name": "A"})
        self.clock.advance(seconds=-2)
        second = await self.storage.enqueue_mutation("/api/events/1", "PATCH", data={"name": "B"})
        third = await self.storage.enqueue_mutation("/api/events/1", "DELETE")

        pending = await self.storage.list_pending_mutations()

        self.assertEqual([item.id for item in pending], [first, second, third])

    async def test_remove_twice_is_a_noop(self):

        keep = await self.storage.enqueue_mutation("/api/issues", "POST", data={})
        drop = await self.storage.enqueue_mutation("/api/issues", "POST", data={})

        self.assertTrue(await self.storage.remove_pending_mutation(drop))
        self.assertFalse(await self.storage.remove_pending_mutation(drop))

        pending = await self.storage.list_pending_mutations()
        self.assertEqual([item.id for item in pending], [keep])

    async def test_malformed_id(self):
        await self.storage.enqueue_mutation("/api/issues", "POST", data={})

        self.assertFalse(await self.storage.remove_pending_mutation("abc"))
        self.assertFalse(await self.storage.remove_pending_mutation(None))
        with self.assertRaises(PendingMutationNotFound):
            await self.storage.increment_retry("abc")
        self.assertEqual(await PendingSyncItem.objects.acount(), 1)

    async def test_increment_retry(self):

        item_id = await self.storage.enqueue_mutation("/api/expenses", "POST", data={"amount": 120})

        item = await self.storage.increment_retry(item_id)

        self.assertEqual(item.retry_count, 1)
        stored = await PendingSyncItem.objects.aget(id=item_id)
        self.assertEqual(stored.retry_count, 1)

    async def test_increment_retry_unknown_item(self):
        with self.assertRaises(PendingMutationNotFound) as ctx:
            await self.storage.increment_retry(9999)

        self.assertIsInstance(ctx.exception, NotFound)
        self.assertEqual(ctx.exception.item_id, 9999)

    async def test_increment_retry_after_removal(self):
        item_id = await self.storage.enqueue_mutation("/api/tasks", "POST", data={})
        await self.storage.remove_pending_mutation(item_id)

        with self.assertRaises(NotFound):
            await self.storage.increment_retry(item_id)

    async def test_rejects_unknown_method(self):
        with self.assertRaises(ValueError):
            await self.storage.enqueue_mutation("/api/tasks", "GET")

    async def test_unserializable_payload_is_not_queued(self):
        with self.assertRaises(SerializationFailure):
            await self.storage.enqueue_mutation("/api/tasks", "POST", data={"callback": object()})

        self.assertEqual(await PendingSyncItem.objects.acount(), 0)


class CacheTests(TestCase):
    """Expiring key/value cache"""

    def setUp(self):
        self.clock = FakeClock()
        self.storage = OfflineStorage(clock=self.clock)

    async def test_entry_without_ttl_never_expires(self):
        await self.storage.put_cache("events:list", [{"id": 1}])

        self.clock.advance(days=3650)

        self.assertEqual(await self.storage.get_cache("events:list"), [{"id": 1}])

    async def test_entry_is_served_until_it_expires(self):
        await self.storage.put_cache("tasks:list", ["a"], ttl=60)

        self.clock.advance(seconds=30)

        self.assertEqual(await self.storage.get_cache("tasks:list"), ["a"])

    async def test_expired_read_is_a_miss_and_deletes_the_entry(self):
        await self.storage.put_cache("tasks:list", ["a"], ttl=60)

        self.clock.advance(seconds=61)

        self.assertIsNone(await self.storage.get_cache("tasks:list"))
        self.assertFalse(await CacheEntry.objects.filter(key="tasks:list").aexists())

    async def test_missing_key_returns_default(self):
        self.assertIsNone(await self.storage.get_cache("nope"))
        self.assertEqual(await self.storage.get_cache("nope", default=[]), [])

    async def test_put_overwrites_value_and_expiry(self):
        await self.storage.put_cache("settings", {"lang": "he"}, ttl=10)
        await self.storage.put_cache("settings", {"lang": "ru"})

        self.clock.advance(hours=1)

        self.assertEqual(await self.storage.get_cache("settings"), {"lang": "ru"})

    async def test_ttl_accepts_timedelta(self):
        await self.storage.put_cache("protocols", [], ttl=timedelta(minutes=5))

        entry = await CacheEntry.objects.aget(key="protocols")
        self.assertEqual(entry.expires_at, self.clock.now + timedelta(minutes=5))

    async def test_non_positive_ttl_is_rejected(self):
        with self.assertRaises(ValueError):
            await self.storage.put_cache("k", 1, ttl=0)

    async def test_unserializable_value(self):
        with self.assertRaises(SerializationFailure):
            await self.storage.put_cache("k", {1, 2, 3})

    async def test_values_read_back_with_their_stored_type(self):
        value = {"amount": 1.5, "count": 3, "paid": True, "note": None, "tags": ["a", "b"]}
        await self.storage.put_cache("expense", value)

        self.assertEqual(await self.storage.get_cache("expense"), value)

    async def test_non_native_json_values_are_refused(self):
        for value in (Decimal("1.50"), timezone.now(), uuid.uuid4(), float("nan")):
            with self.subTest(value=value):
                with self.assertRaises(SerializationFailure):
                    await self.storage.put_cache("k", {"amount": value})

        self.assertFalse(await CacheEntry.objects.filter(key="k").aexists())
        with self.assertRaises(SerializationFailure):
            await self.storage.enqueue_mutation("/api/expenses", "POST", data={"amount": Decimal("1.50")})


    async def test_delete_cache(self):
        await self.storage.put_cache("k", "v")

        self.assertTrue(await self.storage.delete_cache("k"))
        self.assertFalse(await self.storage.delete_cache("k"))
        self.assertIsNone(await self.storage.get_cache("k"))

    async def test_sweep_removes_only_expired_entries(self):
        await self.storage.put_cache("short-1", 1, ttl=10)
        await self.storage.put_cache("short-2", 2, ttl=20)
        await self.storage.put_cache("long", 3, ttl=3600)
        await self.storage.put_cache("forever", 4)

        self.clock.advance(seconds=30)
        removed = await self.storage.sweep_expired_cache()

        self.assertEqual(removed, 2)
        keys = [key async for key in CacheEntry.objects.order_by("key").values_list("key", flat=True)]
        self.assertEqual(keys, ["forever", "long"])


class EntityPartitionTests(TestCase):
    """Mirrored events/tasks/protocols"""

    def setUp(self):
        self.storage = OfflineStorage(clock=FakeClock())

    async def test_store_get_and_list(self):
        await self.storage.store_entity("events", {"id": 2, "title": "Parents meeting"})
        await self.storage.store_entity("events", {"id": 1, "title": "Bake sale"})

        self.assertEqual(await self.storage.get_entity("events", 1), {"id": 1, "title": "Bake sale"})
        self.assertEqual(
            await self.storage.list_entities("events"),
            [{"id": 1, "title": "Bake sale"}, {"id": 2, "title": "Parents meeting"}],
        )
        self.assertEqual(await self.storage.list_entities("tasks"), [])

    async def test_numeric_and_string_ids_address_the_same_row(self):
        await self.storage.store_entity("tasks", {"id": 5, "title": "Buy balloons"})
        await self.storage.store_entity("tasks", {"id": "5", "title": "Buy more balloons"})

        self.assertEqual(await OfflineTask.objects.acount(), 1)
        self.assertEqual((await self.storage.get_entity("tasks", 5))["title"], "Buy more balloons")

    async def test_get_missing_entity(self):
        self.assertIsNone(await self.storage.get_entity("protocols", "abc"))

    async def test_unknown_partition_returns_empty_results(self):
        self.assertFalse(self.storage.supports_partition("vendors"))
        self.assertTrue(self.storage.supports_partition("events"))

        self.assertIsNone(await self.storage.store_entity("vendors", {"id": 1}))
        self.assertIsNone(await self.storage.get_entity("vendors", 1))
        self.assertEqual(await self.storage.list_entities("vendors"), [])

    async def test_unknown_partition_in_strict_mode(self):
        storage = OfflineStorage(strict_partitions=True)

        with self.assertRaises(PartitionNotFound) as ctx:
            await storage.list_entities("vendors")

        self.assertEqual(ctx.exception.partition, "vendors")

    async def test_entity_without_id(self):
        with self.assertRaises(SerializationFailure):
            await self.storage.store_entity("events", {"title": "No id"})

    async def test_entity_id_too_long(self):
        with self.assertRaises(SerializationFailure):
            await self.storage.store_entity("events", {"id": "x" * 256})

        await self.storage.store_entity("events", {"id": "x" * 255})
        self.assertEqual(await OfflineEvent.objects.acount(), 1)


    async def test_clear_all_wipes_every_partition(self):
        await self.storage.enqueue_mutation("/api/events", "POST", data={})
        await self.storage.put_cache("k", "v")
        await self.storage.store_entity("events", {"id": 1})
        await self.storage.store_entity("tasks", {"id": 1})
        await self.storage.store_entity("protocols", {"id": 1})

        await self.storage.clear_all()

        status_counts = await self.storage.status()
        self.assertEqual(status_counts["pending_mutations"], 0)
        self.assertEqual(status_counts["cache_entries"], 0)
        self.assertEqual(status_counts["partitions"], {"events": 0, "tasks": 0, "protocols": 0})


class OpenStorageTests(TestCase):
    async def test_open(self):
        storage = await OfflineStorage.open()

        self.assertEqual(storage.using, "default")
        self.assertFalse(storage.strict_partitions)

    async def test_open_reads_settings(self):
        with override_settings(OFFLINE_STORAGE={"DATABASE": "default", "STRICT_PARTITIONS": True}):
            storage = await open_offline_storage()

        self.assertTrue(storage.strict_partitions)

    async def test_unknown_database_alias(self):
        with self.assertRaises(StorageUnavailable):
            await OfflineStorage.open(using="offline-device")

    async def test_missing_tables(self):
        with mock.patch(
            "django.db.backends.sqlite3.introspection.DatabaseIntrospection.table_names",
            return_value=["offline_cache"],
        ):
            with self.assertRaises(StorageUnavailable) as ctx:
                await OfflineStorage.open()

        self.assertIn("offline_pending_sync", str(ctx.exception))

    def test_scoped_transaction_maps_connectivity_errors(self):
        with self.assertRaises(StorageUnavailable):
            with scoped_transaction("default"):
                raise OperationalError("unable to open database file")


class OfflineApiTests(TestCase):
    def setUp(self):
        offline_views._storage = None
        self.addCleanup(setattr, offline_views, "_storage", None)
        self.client = AuthenticatedAPIClient()
        self.clock = FakeClock()

    def test_pending_queue_requires_editor(self):
        self.client.authenticate_user(TestDataFactory.create_user(role="member"))

        response = self.client.get("/api/v1/offline/pending/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])

    def test_pending_queue_in_replay_order(self):
        first = PendingSyncItem.objects.create(url="/api/tasks", method="POST", timestamp=self.clock.now + timedelta(minutes=1))
        second = PendingSyncItem.objects.create(url="/api/tasks/2", method="PATCH", timestamp=self.clock.now)
        self.client.authenticate_user(TestDataFactory.create_user(role="editor"))

        response = self.client.get("/api/v1/offline/pending/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data["results"]], [first.id, second.id])

    def test_status(self):
        PendingSyncItem.objects.create(url="/api/tasks", method="POST")
        CacheEntry.objects.create(key="fresh", value=1)
        CacheEntry.objects.create(key="stale", value=2, expires_at=timezone.now() - timedelta(days=1))
        OfflineEvent.objects.create(id="1", data={"id": 1})
        self.client.authenticate_user(TestDataFactory.create_user(role="admin"))

        response = self.client.get("/api/v1/offline/status/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["pending_mutations"], 1)
        self.assertEqual(response.data["cache_entries"], 2)
        self.assertEqual(response.data["expired_cache_entries"], 1)
        self.assertEqual(response.data["partitions"], {"events": 1, "tasks": 0, "protocols": 0})

    def test_status_opens_storage_once(self):
        self.client.authenticate_user(TestDataFactory.create_user(role="editor"))

        with mock.patch.object(OfflineStorage, "_check_available", autospec=True) as check:
            self.client.get("/api/v1/offline/status/")
            response = self.client.get("/api/v1/offline/status/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        check.assert_called_once()


class OfflineCommandTests(TestCase):

    def test_sweep_offline_cache(self):
        CacheEntry.objects.create(key="stale", value=1, expires_at=timezone.now() - timedelta(days=1))
        CacheEntry.objects.create(key="forever", value=2)
        out = StringIO()

        call_command("sweep_offline_cache", stdout=out)

        self.assertIn("Removed 1 expired cache entries", out.getvalue())
        self.assertEqual(list(CacheEntry.objects.values_list("key", flat=True)), ["forever"])

    def test_clear_offline_storage(self):
        PendingSyncItem.objects.create(url="/api/tasks", method="POST")
        OfflineTask.objects.create(id="7", data={"id": 7})
        out = StringIO()

        call_command("clear_offline_storage", interactive=False, stdout=out)

        self.assertIn("Offline storage cleared", out.getvalue())
        self.assertFalse(PendingSyncItem.objects.exists())
        self.assertFalse(OfflineTask.objects.exists())
