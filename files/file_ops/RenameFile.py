from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from accounts.authentication import CustomJWEAuthentication
from ..serializers import FileSerializer, RenameFileSerializer
from ..services.tree import FolderService


class RenameFileAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def patch(self, request, file_uid):
        serializer = RenameFileSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        file = FolderService().rename_file(file_uid, serializer.validated_data["name"], request.user)
        return Response({
            "message": "File renamed successfully.",
            "file": FileSerializer(file).data,
        })
