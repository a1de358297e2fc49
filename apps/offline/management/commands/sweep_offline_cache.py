"""
Delete expired offline cache entries

Reads already treat expired entries as misses; this keeps the table small.
Run it periodically (cron, scheduler).
"""
from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from apps.offline.errors import StorageUnavailable
from apps.offline.storage import open_offline_storage


class Command(BaseCommand):
    help = "Delete expired entries from the offline cache"

    def add_arguments(self, parser):
        parser.add_argument(
            "--database",
            help="Database alias holding the offline store (default: OFFLINE_STORAGE['DATABASE'])",
        )

    def handle(self, *args, **options):
        overrides = {"using": options["database"]} if options.get("database") else {}

        try:
            storage = async_to_sync(open_offline_storage)(**overrides)
        except StorageUnavailable as e:
            raise CommandError(str(e)) from e

        removed = async_to_sync(storage.sweep_expired_cache)()
        self.stdout.write(self.style.SUCCESS(f"Removed {removed} expired cache entries"))
