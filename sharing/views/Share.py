from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions
from accounts.authentication import CustomJWEAuthentication
from ..serializers import BulkShareSerializer, ShareSerializer
from ..services.shares import share_service


class ShareFileOrFolderAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = ShareSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        result = share_service.share(
            data["resource_uid"],
            data["resource_type"],
            request.user,
            data["email"],
            data["role"],
            data["inherit_to_children"],
        )
        share = result.share
        return Response({
            "message": f"{data['role'].title()} access granted to {share.shared_with.email}.",
            "share_id": str(share.uid),
            "resource_uid": str(share.resource_id),
            "resource_type": share.resource_type,
            "role": share.role,
            "shared_with": share.shared_with.email,
            "children_affected": result.children_affected,
        }, status=status.HTTP_201_CREATED)


class BulkShareAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = BulkShareSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        result = share_service.bulk_share(
            data["resources"], request.user, data["email"], data["role"], data["inherit_to_children"],
        )
        return Response(result.as_dict(), status=status.HTTP_200_OK)
