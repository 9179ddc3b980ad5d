import logging

from django.db.models import F
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status
from accounts.authentication import CustomJWEAuthentication
from accounts.models import CustomUser
from accounts.utils.jwe_utils import decrypt_jwe
from accounts.utils.token_utils import create_access_token

logger = logging.getLogger(__name__)


class RefreshTokenView(APIView):
    """Trade a still valid access token for a fresh one with a new expiry."""
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request):
        token = create_access_token(request.user)
        return Response({
            "access_token": token,
            "expires_at": decrypt_jwe(token)["exp"],
        }, status=status.HTTP_200_OK)


class ValidateTokenView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        payload = decrypt_jwe(request.auth)
        return Response({
            "valid": True,
            "user_id": str(request.user.uid),
            "email": request.user.email,
            "expires_at": payload["exp"],
        }, status=status.HTTP_200_OK)


class LogoutView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def post(self, request):
        # every token carrying the old version stops authenticating
        CustomUser.objects.filter(pk=request.user.pk).update(access_token_version=F("access_token_version") + 1)
        logger.info("User %s logged out; issued tokens revoked", request.user.uid)
        return Response({"message": "Logged out successfully."}, status=status.HTTP_200_OK)
