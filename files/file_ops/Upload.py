from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework import status
from accounts.authentication import CustomJWEAuthentication
from drive_backend.exceptions import ValidationError
from ..serializers import FileSerializer
from ..services.uploads import UploadItem, UploadService


def _upload_entries(request):
    """
    Collect ``files[i].file`` / ``files[i].relative_path`` pairs, falling back
    to a plain list of ``files`` parts.
    """
    entries = []
    index = 0
    while f"files[{index}].file" in request.FILES:
        upload = request.FILES[f"files[{index}].file"]
        entries.append((upload, request.data.get(f"files[{index}].relative_path", "")))
        index += 1
    if not entries:
        entries = [(upload, "") for upload in request.FILES.getlist("files")]
    return entries


class MultiFileUploadAPIView(APIView):
    parser_classes = [MultiPartParser, FormParser]
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        entries = _upload_entries(request)
        if not entries:
            raise ValidationError("No files found.")

        uploads = [
            UploadItem(
                name=upload.name,
                fileobj=upload,
                size=upload.size,
                content_type=upload.content_type or "",
                relative_path=relative_path or "",
            )
            for upload, relative_path in entries
        ]
        files = UploadService().upload_files(request.user, uploads, request.data.get("folder_uid") or None)
        return Response({
            "message": f"{len(files)} file(s) uploaded successfully.",
            "files": FileSerializer(files, many=True).data,
        }, status=status.HTTP_201_CREATED)
