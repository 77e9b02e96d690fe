"""
Project-wide pytest configuration.

pytest-django creates a throwaway SQLite database for the session, so no
database fixtures are overridden here.
"""

import pytest


def pytest_configure():
    """Adjust settings that must not leak from the developer environment."""
    from django.conf import settings

    # Token tests set CONTENT_TOKEN themselves through the settings fixture
    settings.CONTENT_TOKEN = ""


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_views.py, test_services.py, test_tasks.py, etc. → integration
    - test_sniffer.py, test_storage.py, test_quota.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_tasks.py",
        "test_catalog.py",
        "test_previews.py",
        "test_handlers.py",
        "test_health.py",
    ]

    unit_patterns = [
        "test_types.py",
        "test_sniffer.py",
        "test_storage.py",
        "test_quota.py",
        "test_serializers.py",
        "test_middleware.py",
    ]

    for item in items:
        # Skip if test already has unit/integration marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            # Default: integration (safe for Django where most tests hit DB)
            item.add_marker(pytest.mark.integration)
