import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Brick",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("name", models.CharField(max_length=120, verbose_name="nom")),
                ("region", models.CharField(blank=True, default="", max_length=120, verbose_name="region")),
            ],
            options={
                "verbose_name": "brick",
                "verbose_name_plural": "bricks",
                "ordering": ["region", "name"],
                "constraints": [
                    models.UniqueConstraint(fields=("region", "name"), name="uniq_brick_per_region"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("name", models.CharField(max_length=255, unique=True, verbose_name="nom")),
                ("is_active", models.BooleanField(default=True, verbose_name="actif")),
            ],
            options={
                "verbose_name": "produit",
                "verbose_name_plural": "produits",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Doctor",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("first_name", models.CharField(blank=True, default="", max_length=150, verbose_name="prenom")),
                ("last_name", models.CharField(max_length=150, verbose_name="nom")),
                (
                    "specialty",
                    models.CharField(
                        choices=[
                            ("generaliste", "Medecin generaliste"),
                            ("cardiologue", "Cardiologue"),
                            ("pneumologue", "Pneumologue"),
                            ("interniste", "Interniste"),
                        ],
                        default="generaliste",
                        max_length=20,
                        verbose_name="specialite",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="actif")),
                (
                    "brick",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="doctors",
                        to="catalog.brick",
                        verbose_name="brick",
                    ),
                ),
            ],
            options={
                "verbose_name": "medecin",
                "verbose_name_plural": "medecins",
                "ordering": ["last_name", "first_name"],
            },
        ),
    ]
