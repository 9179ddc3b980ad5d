from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions
from accounts.authentication import CustomJWEAuthentication
from ..serializers import UpdateShareSerializer
from ..services.shares import share_service


class ManageShareAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, share_uid):
        return Response(share_service.share_details(share_uid, request.user))

    def patch(self, request, share_uid):
        serializer = UpdateShareSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        share = share_service.update_role(share_uid, serializer.validated_data["role"], request.user)
        return Response({"message": "Share updated.", "share_id": str(share.uid), "role": share.role})

    def delete(self, request, share_uid):
        share = share_service.revoke(share_uid, request.user)
        return Response({"message": "Access revoked.", "share_id": str(share.uid), "revoked_at": share.revoked_at})
