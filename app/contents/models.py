"""
Catalog model for the content store.

One row per content. The table and column names are fixed so an existing
catalog database can be opened as-is:

    Contents(ContentId, Data, Extension, Mime, Name, Size, Tags, Time)

The row holds metadata only; the bytes live in the blob and preview
directories under the same id.
"""

from django.db import models


class CatalogEntry(models.Model):
    """
    Metadata row of a stored content.

    Fields:
        uuid: Content id (UUID4 string), also the blob and preview file name
        data: Caller's JSON document, stored as encoded text
        extension/mime: Detected from the blob bytes at write time
        name: Display name
        size: Byte length of the primary blob
        tags: Tags joined with "," (empty string for no tags)
        time: Caller-supplied timestamp in epoch milliseconds
    """

    uuid = models.CharField(
        primary_key=True,
        max_length=36,
        db_column="ContentId",
    )
    data = models.TextField(db_column="Data")
    extension = models.TextField(db_column="Extension")
    mime = models.TextField(db_column="Mime")
    name = models.TextField(db_column="Name")
    size = models.BigIntegerField(db_column="Size")
    tags = models.TextField(db_column="Tags", blank=True, default="")
    time = models.BigIntegerField(db_column="Time")

    class Meta:
        db_table = "Contents"
        verbose_name = "catalog entry"
        verbose_name_plural = "catalog entries"

    def __str__(self) -> str:
        return f"{self.name} ({self.uuid})"
