"""
URL configuration for account API endpoints.
"""

from django.urls import path

from api.v1.account import views

app_name = "account"

urlpatterns = [
    path(
        "auth/register",
        views.RegisterView.as_view(),
        name="register",
    ),
    path(
        "auth/login",
        views.LoginView.as_view(),
        name="login",
    ),
    path(
        "auth/logout",
        views.LogoutView.as_view(),
        name="logout",
    ),
    path(
        "account/redeem",
        views.RedeemActivationKeyView.as_view(),
        name="redeem",
    ),
    path(
        "account/me",
        views.MeView.as_view(),
        name="me",
    ),
    path(
        "access/check",
        views.AccessCheckView.as_view(),
        name="access-check",
    ),
]
