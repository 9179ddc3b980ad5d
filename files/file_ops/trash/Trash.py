from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions
from accounts.authentication import CustomJWEAuthentication
from files.serializers import RestoreManySerializer
from files.services.trash import TrashService


class RestoreTrashItemAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, item_type, item_uid):
        item = TrashService().restore(item_uid, item_type, request.user)
        return Response({
            "message": f"{item_type.capitalize()} restored.",
            "id": str(item.uid),
            "type": item_type,
            "name": item.name,
            "path": item.path,
        })


class RestoreManyAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = RestoreManySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = TrashService().restore_many(serializer.validated_data["items"], request.user)
        return Response(result.as_dict())


class PurgeTrashItemAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request, item_type, item_uid):
        count = TrashService().purge(item_uid, item_type, request.user)
        return Response({"message": "Permanently deleted.", "deleted_count": count})


class EmptyTrashAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def delete(self, request):
        count = TrashService().purge_all(request.user)
        return Response({"message": "Trash emptied.", "deleted_count": count})
