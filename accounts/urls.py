from django.urls import path
from accounts.views.google_oauth_views import GoogleOAuthStartView, GoogleOAuthCallbackView
from accounts.views.token_views import RefreshTokenView, ValidateTokenView, LogoutView
from accounts.views.user_views import MeView

urlpatterns = [
    path("me/", MeView.as_view(), name="me"),
    path("oauth/google/", GoogleOAuthStartView.as_view(), name="google-oauth-start"),
    path("oauth/google/callback/", GoogleOAuthCallbackView.as_view(), name="google-oauth-callback"),
    path("token/refresh/", RefreshTokenView.as_view(), name="token-refresh"),
    path("token/validate/", ValidateTokenView.as_view(), name="token-validate"),
    path("logout/", LogoutView.as_view(), name="logout"),
]
