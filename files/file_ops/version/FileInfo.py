from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from accounts.authentication import CustomJWEAuthentication
from sharing.services.permissions import resolver
from ...serializers import FileSerializer
from ...services.tree import FolderService


class FileInfoAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request, file_uid):
        file = FolderService().get_file(file_uid, request.user)
        data = FileSerializer(file).data
        data["path"] = file.path
        data["your_role"] = resolver.role_for(request.user, file)
        return Response(data)
