"""
URL configuration for admin API endpoints.
"""

from django.urls import path

from api.v1.admin import views

app_name = "admin_api"

urlpatterns = [
    path(
        "activation-keys/generate",
        views.GenerateActivationKeysView.as_view(),
        name="generate-keys",
    ),
    path(
        "activation-keys/stats",
        views.ActivationKeyStatsView.as_view(),
        name="key-stats",
    ),
    path(
        "activation-keys/<int:key_id>/revoke",
        views.RevokeActivationKeyView.as_view(),
        name="revoke-key",
    ),
    path(
        "activation-keys",
        views.ListActivationKeysView.as_view(),
        name="list-keys",
    ),
    path(
        "groups/<int:group_id>",
        views.GroupDetailView.as_view(),
        name="group-detail",
    ),
    path(
        "groups",
        views.GroupListView.as_view(),
        name="groups",
    ),
    path(
        "principals/<uuid:principal_id>/group",
        views.PrincipalGroupView.as_view(),
        name="principal-group",
    ),
    path(
        "principals",
        views.PrincipalListView.as_view(),
        name="principals",
    ),
]
