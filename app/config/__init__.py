# Project configuration package: settings, URLs, ASGI/WSGI entry points and
# the Celery app. The Celery app is imported here so that shared_task
# decorators (contents.tasks) bind to it whenever Django starts.

from config.celery import app as celery_app

__all__ = ("celery_app",)
