from uuid import UUID

from background_task import background
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.timezone import now

from notifications.models import Notification


@background(schedule=0)
def send_notification_email_async(notification_id_str):
    try:
        notification = Notification.objects.select_related("recipient").get(pk=UUID(notification_id_str))
    except Notification.DoesNotExist:
        return  # purged before the worker got to it

    user = notification.recipient
    context = {
        "name": user.display_name,
        "title": notification.title,
        "message": notification.message,
        "year": now().year,
    }

    html_content = render_to_string("emails/notification.html", context)
    text_content = f"Hello {context['name']},\n\n{notification.message}"

    email = EmailMultiAlternatives(notification.title, text_content, None, [user.email])
    email.attach_alternative(html_content, "text/html")
    email.send()
