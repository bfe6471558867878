"""Models for yearly sales targets and achievements of a delegate on a product."""
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from core.models import TimeStampedModel
from performance.exceptions import InvalidInput
from performance.records import MONTHS_PER_YEAR, SalesAssignmentRecord, validate_monthly_series


def empty_monthly_series():
    return [0] * MONTHS_PER_YEAR


class SalesAssignment(TimeStampedModel):
    """Twelve monthly targets and achievements, indexed January..December.

    Achievements are written by the sales data import; the indicators only
    read them.
    """

    delegate = models.ForeignKey(
        "organization.Delegate",
        on_delete=models.CASCADE,
        related_name="sales_assignments",
        verbose_name="delegue",
    )
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="sales_assignments",
        verbose_name="produit",
    )
    year = models.PositiveSmallIntegerField(
        "annee",
        validators=[MinValueValidator(2000)],
    )
    monthly_target = models.JSONField("objectifs mensuels", default=empty_monthly_series)
    monthly_achieved = models.JSONField("realisations mensuelles", default=empty_monthly_series)

    class Meta:
        verbose_name = "objectif de ventes"
        verbose_name_plural = "objectifs de ventes"
        ordering = ["-year", "delegate", "product__name"]
        constraints = [
            models.UniqueConstraint(
                fields=["delegate", "product", "year"],
                name="uniq_sales_assignment_per_year",
            ),
        ]
        indexes = [
            models.Index(fields=["year", "delegate"], name="sales_year_delegate_idx"),
        ]

    def __str__(self):
        return f"{self.delegate} / {self.product} ({self.year})"

    def clean(self):
        errors = {}
        for field_name in ("monthly_target", "monthly_achieved"):
            try:
                validate_monthly_series(getattr(self, field_name), field_name)
            except InvalidInput as exc:
                errors[field_name] = str(exc)
        if errors:
            raise ValidationError(errors)

    def to_record(self) -> SalesAssignmentRecord:
        return SalesAssignmentRecord(
            id=self.pk,
            delegate_id=self.delegate_id,
            product_id=self.product_id,
            year=self.year,
            monthly_target=self.monthly_target,
            monthly_achieved=self.monthly_achieved,
        )
