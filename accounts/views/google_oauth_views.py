import logging
from urllib.parse import urlencode

import requests
from django.conf import settings
from django.db import transaction
from django.utils.timezone import now
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework import status
from accounts.apps import get_state_store
from accounts.models import CustomUser
from accounts.utils.token_utils import create_access_token

logger = logging.getLogger(__name__)

GOOGLE_TIMEOUT = 10


class GoogleOAuthStartView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        state = get_state_store().issue(redirect_uri=settings.GOOGLE_REDIRECT_URI)
        params = {
            "client_id": settings.GOOGLE_CLIENT_ID,
            "redirect_uri": settings.GOOGLE_REDIRECT_URI,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "online",
            "state": state,
        }
        return Response({
            "auth_url": f"{settings.GOOGLE_AUTH_URL}?{urlencode(params)}",
            "state": state,
        })


class GoogleOAuthCallbackView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        state = request.query_params.get("state")
        code = request.query_params.get("code")

        if get_state_store().consume(state) is None:
            return Response({"error": "Invalid or expired OAuth state."}, status=status.HTTP_400_BAD_REQUEST)
        if not code:
            return Response({"error": "Missing authorization code."}, status=status.HTTP_400_BAD_REQUEST)

        try:
            token_response = requests.post(settings.GOOGLE_TOKEN_URL, data={
                "code": code,
                "client_id": settings.GOOGLE_CLIENT_ID,
                "client_secret": settings.GOOGLE_CLIENT_SECRET,
                "redirect_uri": settings.GOOGLE_REDIRECT_URI,
                "grant_type": "authorization_code",
            }, timeout=GOOGLE_TIMEOUT)
            token_json = token_response.json()
            google_access_token = token_json.get("access_token")
            if not google_access_token:
                return Response({"error": "Failed to get token"}, status=status.HTTP_400_BAD_REQUEST)

            user_info = requests.get(
                settings.GOOGLE_USERINFO_URL,
                params={"access_token": google_access_token},
                timeout=GOOGLE_TIMEOUT,
            ).json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Google OAuth exchange failed: %s", exc)
            return Response({"error": "Identity provider unavailable."}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        email = (user_info.get("email") or "").strip().lower()
        if not email:
            return Response({"error": "Email not found in Google account"}, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            user, created = CustomUser.objects.get_or_create(email=email, defaults={
                "first_name": user_info.get("given_name", ""),
                "last_name": user_info.get("family_name", ""),
                "username": user_info.get("name") or None,
            })
            if created:
                user.set_unusable_password()
            if not user.is_active:
                return Response({"error": "Account inactive."}, status=status.HTTP_403_FORBIDDEN)

            user.last_login = now()
            user.access_token_version += 1
            user.save()

        if created:
            logger.info("Created account %s from Google sign-in", user.uid)

        return Response({
            "message": "Login successful",
            "user_id": str(user.uid),
            "email": user.email,
            "access_token": create_access_token(user),
        }, status=status.HTTP_200_OK)
