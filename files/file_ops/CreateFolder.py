from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from accounts.authentication import CustomJWEAuthentication
from ..serializers import CreateFolderSerializer, FolderSerializer
from ..services.tree import FolderService


class CreateFolderAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CreateFolderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        folder = FolderService().create_folder(
            serializer.validated_data['name'],
            request.user,
            serializer.validated_data.get('parent_uid'),
        )
        return Response({
            "message": "Folder created successfully.",
            "folder": FolderSerializer(folder).data,
        }, status=status.HTTP_201_CREATED)
