"""
Base service layer patterns for business logic encapsulation.

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

    - Expected failures are raised as core.exceptions subclasses carrying a
      machine-readable code.
    - Unexpected failures (database errors, bugs) propagate untouched and are
      reported by core.handlers.api_exception_handler.

Usage:
    from core.services import BaseService

    class ContentStore(BaseService):
        def remove(self, uuid: str) -> Content:
            ...
            with self.atomic():
                self.catalog.delete(uuid)

            self.get_logger().info("Removed content", extra={"content_id": uuid})
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Collaborators (storage, catalog, external tools) are passed to
          the constructor so tests can substitute isolated instances
        - Services hold no per-request state
    """

    #: Database alias used by atomic(); services bound to another alias override it.
    using: str = "default"

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @contextmanager
    def atomic(self) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back. File-system writes are not covered.
        """
        with transaction.atomic(using=self.using):
            yield
