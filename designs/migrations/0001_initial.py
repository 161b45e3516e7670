import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("creators", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Design",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user_key", models.CharField(blank=True, db_index=True, max_length=64)),
                ("prompt", models.TextField(max_length=1000)),
                ("image_url", models.URLField(max_length=500)),
                ("no_background_url", models.URLField(blank=True, max_length=500)),
                ("reference_url", models.URLField(blank=True, max_length=500)),
                ("is_public", models.BooleanField(db_index=True, default=True)),
                (
                    "creator",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="designs",
                        to="creators.creator",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["user_key", "created_at"], name="design_user_created_idx"),
                    models.Index(fields=["creator", "created_at"], name="design_creator_created_idx"),
                ],
            },
        ),
    ]
