import secrets

from django.core.cache import caches


class OAuthStateStore:
    """
    OAuth ``state`` values kept in Django's cache framework.

    Each state is an opaque random token that can be consumed exactly once
    before the cache expires it after ``ttl`` seconds. Every worker process
    sees the same states as long as they share a cache backend.
    """

    prefix = "oauth-state"

    def __init__(self, ttl=600, cache_alias="default"):
        self.ttl = ttl
        self.cache_alias = cache_alias

    @property
    def cache(self):
        return caches[self.cache_alias]

    def _key(self, token):
        return f"{self.prefix}:{token}"

    def issue(self, **data):
        token = secrets.token_urlsafe(32)
        self.cache.set(self._key(token), data, timeout=self.ttl)
        return token

    def consume(self, token):
        """Return the data stored for ``token`` and forget it, or None if unknown or expired."""
        if not token:
            return None
        key = self._key(token)
        data = self.cache.get(key)
        # only the caller whose delete removed the key gets the data
        if data is None or not self.cache.delete(key):
            return None
        return data
