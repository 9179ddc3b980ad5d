from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from accounts.authentication import CustomJWEAuthentication
from ..serializers import FileSerializer, FolderSerializer
from ..services.tree import FolderService


class RootContentsAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        contents = FolderService().root_contents(request.user)
        return Response({
            "folders": FolderSerializer(contents["folders"], many=True).data,
            "files": FileSerializer(contents["files"], many=True).data,
        })


class FolderContentsAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request, folder_uid):
        contents = FolderService().folder_contents(folder_uid, request.user)
        return Response({
            "folder": {
                **FolderSerializer(contents.folder).data,
                "role": contents.role,
                "can_edit": contents.can_edit,
                "can_share": contents.can_share,
            },
            "folders": FolderSerializer(contents.folders, many=True).data,
            "files": FileSerializer(contents.files, many=True).data,
        })
