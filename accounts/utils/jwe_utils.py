import base64
import json
from functools import lru_cache

from django.conf import settings
from jwcrypto import jwe, jwk

ALGORITHM = "dir"
ENCRYPTION = "A256GCM"


@lru_cache(maxsize=4)
def _key_for(secret):
    key_bytes = base64.urlsafe_b64decode(secret)
    if len(key_bytes) != 32:
        raise ValueError("JWE_SECRET_KEY must decode to 32 bytes.")
    return jwk.JWK(kty="oct", k=base64.urlsafe_b64encode(key_bytes).decode().rstrip("="))


def _secret_key():
    return _key_for(settings.JWE_SECRET_KEY)


def encrypt_jwe(payload: dict) -> str:
    token = jwe.JWE(
        json.dumps(payload).encode(),
        protected={"alg": ALGORITHM, "enc": ENCRYPTION},
    )
    token.add_recipient(_secret_key())
    return token.serialize(compact=True)


def decrypt_jwe(token: str) -> dict:
    """Decrypt a compact token; anything not sealed with dir/A256GCM is refused."""
    decrypted = jwe.JWE(algs=[ALGORITHM, ENCRYPTION])
    decrypted.deserialize(token, key=_secret_key())
    return json.loads(decrypted.payload)
