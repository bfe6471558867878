import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Delegate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("first_name", models.CharField(max_length=150, verbose_name="prenom")),
                ("last_name", models.CharField(max_length=150, verbose_name="nom")),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("DELEGATE", "Delegue medical"),
                            ("SUPERVISOR", "Superviseur"),
                            ("SALES_DIRECTOR", "Directeur des ventes"),
                        ],
                        default="DELEGATE",
                        max_length=20,
                        verbose_name="role",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="actif")),
                (
                    "supervisor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="team_members",
                        to="organization.delegate",
                        verbose_name="superieur hierarchique",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="delegate_profile",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="utilisateur",
                    ),
                ),
            ],
            options={
                "verbose_name": "delegue",
                "verbose_name_plural": "delegues",
                "ordering": ["last_name", "first_name"],
                "indexes": [
                    models.Index(fields=["role", "is_active"], name="delegate_role_active_idx"),
                    models.Index(fields=["supervisor", "is_active"], name="delegate_supervisor_idx"),
                ],
            },
        ),
    ]
