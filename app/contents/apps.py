"""Django app configuration for contents app."""

from pathlib import Path

from django.apps import AppConfig
from django.conf import settings


class ContentsConfig(AppConfig):
    """Configuration for the contents app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "contents"
    verbose_name = "Contents"

    def ready(self):
        # Create the storage directories up front so /health/ can report them
        for directory in (settings.CONTENT_BLOBS_DIR, settings.CONTENT_PREVIEWS_DIR):
            Path(directory).mkdir(parents=True, exist_ok=True)
