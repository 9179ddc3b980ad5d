import logging

from background_task import background

from files.services.trash import TrashService

logger = logging.getLogger(__name__)

TRASH_CLEANUP_TASK = "files.tasks.auto_purge_expired_items_task"


@background(schedule=0)
def auto_purge_expired_items_task():
    count = TrashService().auto_purge_expired_items()
    logger.info("Scheduled trash cleanup finished, %d items purged", count)
