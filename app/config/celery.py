"""
Celery configuration for the content store.

Celery runs the periodic storage reconciliation job
(contents.tasks.reconcile_storage) outside the request path. The schedule
lives in settings.CELERY_BEAT_SCHEDULE.

This configuration uses Redis as both the message broker and result backend.
Tasks are auto-discovered from all installed Django apps.

Usage:
    # Run a worker with an embedded beat scheduler:
    celery -A config worker -B -l info

    # Trigger a reconciliation by hand:
    from contents.tasks import reconcile_storage
    reconcile_storage.delay()

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Create Celery application instance
# The name should match the Django project name
app = Celery("config")

# Load configuration from Django settings
# All Celery settings should be prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all registered Django apps
# Celery will look for a tasks.py module in each installed app
app.autodiscover_tasks()
