"""
Create the Contents catalog table.
"""

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CatalogEntry",
            fields=[
                (
                    "uuid",
                    models.CharField(
                        db_column="ContentId",
                        max_length=36,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("data", models.TextField(db_column="Data")),
                ("extension", models.TextField(db_column="Extension")),
                ("mime", models.TextField(db_column="Mime")),
                ("name", models.TextField(db_column="Name")),
                ("size", models.BigIntegerField(db_column="Size")),
                (
                    "tags",
                    models.TextField(blank=True, db_column="Tags", default=""),
                ),
                ("time", models.BigIntegerField(db_column="Time")),
            ],
            options={
                "verbose_name": "catalog entry",
                "verbose_name_plural": "catalog entries",
                "db_table": "Contents",
            },
        ),
    ]
