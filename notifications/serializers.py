from rest_framework import serializers
from notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            "uid", "type", "title", "message",
            "created_at", "read", "related_item_id", "related_item_type",
        ]
