import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("organization", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="VisitAssignment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                (
                    "monthly_frequency",
                    models.PositiveSmallIntegerField(
                        choices=[(1, "1 visite / mois"), (2, "2 visites / mois")],
                        default=1,
                        verbose_name="frequence mensuelle",
                    ),
                ),
                (
                    "delegate",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="visit_assignments",
                        to="organization.delegate",
                        verbose_name="delegue",
                    ),
                ),
                (
                    "doctor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="visit_assignments",
                        to="catalog.doctor",
                        verbose_name="medecin",
                    ),
                ),
            ],
            options={
                "verbose_name": "affectation de visite",
                "verbose_name_plural": "affectations de visite",
                "ordering": ["delegate", "doctor__last_name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("delegate", "doctor"),
                        name="uniq_visit_assignment_delegate_doctor",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("monthly_frequency__in", [1, 2])),
                        name="visit_assignment_frequency_1_or_2",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VisitEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("visit_date", models.DateField(verbose_name="date de visite")),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="visits.visitassignment",
                        verbose_name="affectation",
                    ),
                ),
                (
                    "recorded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="recorded_visits",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="saisi par",
                    ),
                ),
            ],
            options={
                "verbose_name": "visite",
                "verbose_name_plural": "visites",
                "ordering": ["-visit_date"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("assignment", "visit_date"),
                        name="uniq_visit_event_per_day",
                    ),
                ],
            },
        ),
    ]
