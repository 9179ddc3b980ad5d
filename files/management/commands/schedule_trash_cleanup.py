from background_task.models import Task
from django.conf import settings
from django.core.management.base import BaseCommand

from files.tasks import TRASH_CLEANUP_TASK, auto_purge_expired_items_task


class Command(BaseCommand):
    help = "Schedule the repeating trash cleanup task (run the worker with `manage.py process_tasks`)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--interval", type=int, default=settings.TRASH_CLEANUP_INTERVAL,
            help="Seconds between sweeps.",
        )
        parser.add_argument(
            "--replace", action="store_true",
            help="Remove an already scheduled cleanup task first.",
        )

    def handle(self, *args, **options):
        existing = Task.objects.filter(task_name=TRASH_CLEANUP_TASK)
        if existing.exists():
            if not options["replace"]:
                self.stdout.write("Trash cleanup is already scheduled.")
                return
            existing.delete()

        auto_purge_expired_items_task(repeat=options["interval"], verbose_name="trash-cleanup")
        self.stdout.write(self.style.SUCCESS(
            f"Trash cleanup scheduled every {options['interval']} seconds."
        ))
