from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from accounts.authentication import CustomJWEAuthentication
from ..services.shares import share_service


class ResourcePermissionsAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request, resource_type, resource_uid):
        return Response(share_service.resource_permissions(resource_uid, resource_type, request.user))
