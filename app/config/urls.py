"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/                       - Content store endpoints
        details/                   - Store limits and usage (GET)
        query/{uuid}/              - Content metadata (GET)
        file/{uuid}/               - Blob served inline (GET)
        download/{uuid}/           - Blob served as attachment (GET)
        preview/{uuid}/            - WEBP preview (GET)
        list/                      - Paged uuids or summaries (GET)
        search/                    - Filtered and ordered listing (GET)
        add/                       - Upload a new content (POST, multipart)
        update/                    - Partially update a content (POST, multipart)
        remove/                    - Remove a content (POST)

Unknown routes answer 404 with error_code MISSING_RESOURCE.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Content store
    path("", include("contents.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# JSON bodies for errors raised outside DRF views
handler404 = "core.handlers.not_found_handler"
handler500 = "core.handlers.server_error_handler"
