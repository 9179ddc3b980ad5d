from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from accounts.authentication import CustomJWEAuthentication
from ..serializers import FileSerializer, FolderSerializer
from ..services.search import SearchService
from .params import int_param


class SearchAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        result = SearchService().search(
            request.user,
            request.query_params.get("q"),
            limit=int_param(request, "limit", 50),
            offset=int_param(request, "offset", 0),
        )
        return Response({
            "files": FileSerializer(result["files"], many=True).data,
            "folders": FolderSerializer(result["folders"], many=True).data,
        })


class SearchFilesAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        files = SearchService().search_files(
            request.user,
            request.query_params.get("q"),
            limit=int_param(request, "limit", 50),
            offset=int_param(request, "offset", 0),
        )
        return Response({"files": FileSerializer(files, many=True).data})


class SearchFoldersAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        folders = SearchService().search_folders(
            request.user,
            request.query_params.get("q"),
            limit=int_param(request, "limit", 50),
            offset=int_param(request, "offset", 0),
        )
        return Response({"folders": FolderSerializer(folders, many=True).data})


class RecentFilesAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        files = SearchService().recent_files(
            request.user,
            limit=int_param(request, "limit", 20),
            days=int_param(request, "days", 30),
        )
        return Response({"files": FileSerializer(files, many=True).data})
