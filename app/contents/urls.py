"""
URL configuration for contents app.

API Documentation Groups (following [App Name] - [Group Name] pattern):

Contents - Store:
    GET /details/                 - Limits and usage

Contents - Read:
    GET /query/{uuid}/            - Content metadata
    GET /file/{uuid}/             - View blob inline
    GET /download/{uuid}/         - Download blob
    GET /preview/{uuid}/          - View WebP preview

Contents - Search:
    GET /list/                    - List contents
    GET /search/                  - Search contents

Contents - Write:
    POST /add/                    - Add content
    POST /update/                 - Update content
    POST /remove/                 - Remove content
"""

from django.urls import path

from contents.views import (
    ContentAddView,
    ContentDetailsView,
    ContentDownloadView,
    ContentFileView,
    ContentListView,
    ContentPreviewView,
    ContentQueryView,
    ContentRemoveView,
    ContentSearchView,
    ContentUpdateView,
)

app_name = "contents"

urlpatterns = [
    # Store
    path("details/", ContentDetailsView.as_view(), name="details"),
    # Read
    path("query/<str:uuid>/", ContentQueryView.as_view(), name="query"),
    path("file/<str:uuid>/", ContentFileView.as_view(), name="file"),
    path("download/<str:uuid>/", ContentDownloadView.as_view(), name="download"),
    path("preview/<str:uuid>/", ContentPreviewView.as_view(), name="preview"),
    # Search
    path("list/", ContentListView.as_view(), name="list"),
    path("search/", ContentSearchView.as_view(), name="search"),
    # Write
    path("add/", ContentAddView.as_view(), name="add"),
    path("update/", ContentUpdateView.as_view(), name="update"),
    path("remove/", ContentRemoveView.as_view(), name="remove"),
]
