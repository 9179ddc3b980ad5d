from django.apps import AppConfig, apps
from django.conf import settings


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"

    def ready(self):
        from accounts.state_store import OAuthStateStore

        self.state_store = OAuthStateStore(ttl=settings.OAUTH_STATE_TTL)


def get_state_store():
    return apps.get_app_config("accounts").state_store
