import logging
from urllib.parse import quote

from django.http import StreamingHttpResponse
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import permissions
from accounts.authentication import CustomJWEAuthentication
from ..services.export import FolderExportService
from ..services.tree import FolderService

logger = logging.getLogger(__name__)


class DownloadFileAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, file_uid):
        file, url = FolderService().download_url(file_uid, request.user)
        return Response({"file_uid": str(file.uid), "name": file.name, "download_url": url})


class PreviewFileAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, file_uid):
        file, url = FolderService().preview_url(file_uid, request.user)
        return Response({
            "file_uid": str(file.uid),
            "name": file.name,
            "mime_type": file.mime_type,
            "preview_url": url,
        })


class DownloadFolderAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, folder_uid):
        # access is checked here, before any byte of the archive is produced
        folder, chunks = FolderExportService().download_folder(folder_uid, request.user)
        response = StreamingHttpResponse(chunks, content_type="application/zip")
        response["Content-Disposition"] = f"attachment; filename*=UTF-8''{quote(folder.name)}.zip"
        logger.info("Streaming folder %s as zip to %s", folder.uid, request.user.pk)
        return response
