from django.core.management.base import BaseCommand

from files.services.trash import TrashService


class Command(BaseCommand):
    help = "Permanently delete trash items older than the retention period."

    def handle(self, *args, **options):
        count = TrashService().auto_purge_expired_items()
        self.stdout.write(self.style.SUCCESS(f"Purged {count} expired trash items."))
