"""
ASGI entry point for the content store.

Every view is synchronous; under an ASGI server (uvicorn config.asgi:application)
Django runs them in its thread pool.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_asgi_application()
