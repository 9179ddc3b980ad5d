from django.urls import path
from notifications.views import NotificationListView, MarkNotificationReadView

urlpatterns = [
    path("", NotificationListView.as_view(), name="notification-list"),
    path("<uuid:uid>/read/", MarkNotificationReadView.as_view(), name="notification-read"),
]
