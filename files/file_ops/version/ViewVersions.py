from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from accounts.authentication import CustomJWEAuthentication
from ...serializers import FileVersionSerializer
from ...services.tree import FolderService


class ListFileVersionsAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request, file_uid):
        file, versions = FolderService().file_versions(file_uid, request.user)
        return Response({
            "file_uid": str(file.uid),
            "current_version": file.version,
            "versions": FileVersionSerializer(versions, many=True).data,
        })
