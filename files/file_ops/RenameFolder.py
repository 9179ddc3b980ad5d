from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from accounts.authentication import CustomJWEAuthentication
from ..serializers import FolderSerializer, RenameFolderSerializer
from ..services.tree import FolderService


class RenameFolderAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def patch(self, request, folder_uid):
        serializer = RenameFolderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        folder = FolderService().rename_folder(folder_uid, serializer.validated_data["name"], request.user)
        return Response({
            "message": "Folder renamed successfully.",
            "folder": FolderSerializer(folder).data,
        })
