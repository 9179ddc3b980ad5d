from datetime import timedelta
from accounts.utils.jwe_utils import encrypt_jwe
from django.conf import settings
from django.utils.timezone import now


def create_access_token(user, lifetime=None):
    current_time = now()
    if lifetime is None:
        lifetime = timedelta(minutes=settings.ACCESS_TOKEN_LIFETIME_MINUTES)
    payload = {
        "uid": str(user.uid),
        "type": "access",
        "access_token_version": user.access_token_version,
        "exp": (current_time + lifetime).isoformat()
    }
    return encrypt_jwe(payload)
