from uuid import UUID

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status
from accounts.authentication import CustomJWEAuthentication
from notifications.models import Notification
from notifications.serializers import NotificationSerializer


class NotificationListView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        notifications = Notification.objects.filter(recipient=request.user)
        if request.query_params.get("unread") in ("1", "true"):
            notifications = notifications.filter(read=False)
        serializer = NotificationSerializer(notifications, many=True)
        return Response(serializer.data)


class MarkNotificationReadView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request, uid):
        try:
            uid = UUID(str(uid))
        except ValueError:
            return Response({"error": "Invalid UID."}, status=status.HTTP_400_BAD_REQUEST)

        updated = Notification.objects.filter(uid=uid, recipient=request.user).update(read=True)
        if not updated:
            return Response({"error": "Notification not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response({"message": "Notification marked as read."})
