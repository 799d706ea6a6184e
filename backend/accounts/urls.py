# accounts/urls.py
"""
URL configuration for authentication and company switching.

Endpoints:
- /auth/login/ - Obtain JWT pair with email + password
- /auth/refresh/ - Refresh access token
- /auth/logout/ - Blacklist refresh token
- /auth/me/ - Current user and memberships
- /auth/switch-company/ - Change the active company
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, LogoutView, MeView, SwitchCompanyView

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="auth-login"),
    path("auth/refresh/", TokenRefreshView.as_view(), name="auth-refresh"),
    path("auth/logout/", LogoutView.as_view(), name="auth-logout"),
    path("auth/me/", MeView.as_view(), name="auth-me"),
    path("auth/switch-company/", SwitchCompanyView.as_view(), name="auth-switch-company"),
]
