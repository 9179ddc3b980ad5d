from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from accounts.authentication import CustomJWEAuthentication
from ..services.tree import FolderService


class DeleteFolderAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def delete(self, request, folder_uid):
        summary = FolderService().delete_folder(folder_uid, request.user)
        return Response({
            "message": "Folder moved to trash.",
            "folders_trashed": summary["folders"],
            "files_trashed": summary["files"],
            "deleted_at": summary["deleted_at"],
        })


class DeleteFileFromFolderAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def delete(self, request, folder_uid, file_uid):
        file = FolderService().delete_file_from_folder(folder_uid, file_uid, request.user)
        return Response({"message": "File moved to trash.", "file_uid": str(file.uid)})


class DeleteFileAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def delete(self, request, file_uid):
        file = FolderService().delete_file(file_uid, request.user)
        return Response({"message": "File moved to trash.", "file_uid": str(file.uid)})
