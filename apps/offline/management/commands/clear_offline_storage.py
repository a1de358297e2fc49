from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from apps.offline.errors import StorageUnavailable
from apps.offline.storage import open_offline_storage


class Command(BaseCommand):
    help = "Wipe the offline store: pending mutations, cache and mirrored entities"

    def add_arguments(self, parser):
        parser.add_argument(
            "--noinput",
            "--no-input",
            action="store_false",
            dest="interactive",
            help="Do not ask for confirmation",
        )
        parser.add_argument(
            "--database",
            help="Database alias holding the offline store (default: OFFLINE_STORAGE['DATABASE'])",
        )

    def handle(self, *args, **options):
        if options["interactive"]:
            answer = input("This deletes every queued mutation and cached row. Type 'yes' to continue: ")
            if answer.strip().lower() != "yes":
                self.stdout.write("Cancelled.")
                return

        overrides = {"using": options["database"]} if options.get("database") else {}

        try:
            storage = async_to_sync(open_offline_storage)(**overrides)
        except StorageUnavailable as e:
            raise CommandError(str(e)) from e

        async_to_sync(storage.clear_all)()
        self.stdout.write(self.style.SUCCESS("Offline storage cleared"))
