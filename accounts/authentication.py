import logging

from jwcrypto.common import JWException
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from accounts.utils.jwe_utils import decrypt_jwe
from accounts.models import CustomUser
from django.utils.timezone import now
from django.utils.dateparse import parse_datetime

logger = logging.getLogger(__name__)


class CustomJWEAuthentication(BaseAuthentication):
    keyword = "Bearer"

    def authenticate(self, request):
        auth_header = request.headers.get('Authorization')
        if not auth_header or not auth_header.startswith(self.keyword + " "):
            return None

        token = auth_header.split(self.keyword + " ", 1)[1].strip()
        try:
            payload = decrypt_jwe(token)
        except (JWException, ValueError) as exc:
            logger.debug("Rejected bearer token: %s", exc)
            raise AuthenticationFailed("Invalid or expired token.")

        if payload.get("type") != "access":
            raise AuthenticationFailed("Expected access token.")

        exp_timestamp = payload.get("exp")
        if not exp_timestamp:
            raise AuthenticationFailed("Token missing expiration claim.")

        exp_datetime = parse_datetime(exp_timestamp)
        if not exp_datetime:
            raise AuthenticationFailed("Invalid expiration timestamp format.")

        if now() > exp_datetime:
            raise AuthenticationFailed("Access token has expired.")

        uid = payload.get("uid")
        token_version = payload.get("access_token_version")

        try:
            user = CustomUser.objects.get(uid=uid)
        except (CustomUser.DoesNotExist, ValueError):
            raise AuthenticationFailed("User not found.")

        if not user.is_active:
            raise AuthenticationFailed("User account is disabled.")

        if user.access_token_version != token_version:
            raise AuthenticationFailed("Token is stale or revoked.")

        return (user, token)

    def authenticate_header(self, request):
        return self.keyword
