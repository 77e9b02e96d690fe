"""
Factory Boy factories for contents models.

Usage:
    from contents.tests.factories import CatalogEntryFactory

    # A catalog row with default values
    entry = CatalogEntryFactory()

    # A row with specific metadata
    entry = CatalogEntryFactory(name="cat", tags="pet,cute", time=1_700_000_000_000)

Note:
    Only the catalog row is created. Tests that need the blob and preview
    files go through ContentStore.add or write them with a BlobStore.
"""

import json
import uuid

import factory

from contents.models import CatalogEntry


class CatalogEntryFactory(factory.django.DjangoModelFactory):
    """
    Factory for CatalogEntry rows.

    Examples:
        # PNG image named "photo-3"
        entry = CatalogEntryFactory()

        # Video row
        entry = CatalogEntryFactory(extension="mp4", mime="video/mp4")
    """

    class Meta:
        model = CatalogEntry

    uuid = factory.LazyFunction(lambda: str(uuid.uuid4()))
    data = factory.LazyFunction(lambda: json.dumps({}))
    extension = "png"
    mime = "image/png"
    name = factory.Sequence(lambda n: f"photo-{n}")
    size = 1024
    tags = ""
    time = factory.Sequence(lambda n: 1_700_000_000_000 + n * 1000)
