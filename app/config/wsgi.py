"""
WSGI entry point for the content store.

Uploads are read fully into memory (up to CONTENT_FILE_LIMIT) before the
view runs, so a synchronous worker model such as gunicorn's is sufficient:

    gunicorn config.wsgi:application --chdir app --workers 4

Quota reservations are per process; see contents.quota.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
