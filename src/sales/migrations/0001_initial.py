import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import sales.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("organization", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="SalesAssignment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                (
                    "year",
                    models.PositiveSmallIntegerField(
                        validators=[django.core.validators.MinValueValidator(2000)],
                        verbose_name="annee",
                    ),
                ),
                (
                    "monthly_target",
                    models.JSONField(default=sales.models.empty_monthly_series, verbose_name="objectifs mensuels"),
                ),
                (
                    "monthly_achieved",
                    models.JSONField(default=sales.models.empty_monthly_series, verbose_name="realisations mensuelles"),
                ),
                (
                    "delegate",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sales_assignments",
                        to="organization.delegate",
                        verbose_name="delegue",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales_assignments",
                        to="catalog.product",
                        verbose_name="produit",
                    ),
                ),
            ],
            options={
                "verbose_name": "objectif de ventes",
                "verbose_name_plural": "objectifs de ventes",
                "ordering": ["-year", "delegate", "product__name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("delegate", "product", "year"),
                        name="uniq_sales_assignment_per_year",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["year", "delegate"], name="sales_year_delegate_idx"),
                ],
            },
        ),
    ]
