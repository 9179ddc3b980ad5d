import logging

from notifications.models import Notification
from notifications.tasks import send_notification_email_async

logger = logging.getLogger(__name__)


def notify(recipient, kind, title, message, item_id=None, item_type=""):
    """
    Record a notification for ``recipient`` and queue its e-mail.

    Never raises: a failure is logged and the caller carries on.
    """
    try:
        notification = Notification.objects.create(
            recipient=recipient,
            type=kind,
            title=title,
            message=message,
            related_item_id=item_id,
            related_item_type=item_type or "",
        )
        send_notification_email_async(str(notification.uid))
        return notification
    except Exception:
        logger.exception("Could not send %s notification to %s", kind, getattr(recipient, "pk", recipient))
        return None
