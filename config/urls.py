"""
URL configuration for config project.

Chat streams and the password gate live in ``chat_api``; the dashboard
JSON endpoints live under ``api/data/``.
"""

from django.urls import include, path

urlpatterns = [
    path("", include("chat_api.urls")),
    path("api/data/", include("dcm.urls")),
]
