"""Models for delegate -> doctor visit assignments and the visits recorded on them."""
from django.conf import settings
from django.db import models

from core.models import TimeStampedModel
from performance.records import VisitAssignmentRecord, VisitEventRecord


class VisitAssignment(TimeStampedModel):
    """A doctor in a delegate's portfolio, with the visits expected each month."""

    class Frequency(models.IntegerChoices):
        ONCE = 1, "1 visite / mois"
        TWICE = 2, "2 visites / mois"

    delegate = models.ForeignKey(
        "organization.Delegate",
        on_delete=models.CASCADE,
        related_name="visit_assignments",
        verbose_name="delegue",
    )
    doctor = models.ForeignKey(
        "catalog.Doctor",
        on_delete=models.PROTECT,
        related_name="visit_assignments",
        verbose_name="medecin",
    )
    monthly_frequency = models.PositiveSmallIntegerField(
        "frequence mensuelle",
        choices=Frequency.choices,
        default=Frequency.ONCE,
    )

    class Meta:
        verbose_name = "affectation de visite"
        verbose_name_plural = "affectations de visite"
        ordering = ["delegate", "doctor__last_name"]
        constraints = [
            models.UniqueConstraint(
                fields=["delegate", "doctor"],
                name="uniq_visit_assignment_delegate_doctor",
            ),
            models.CheckConstraint(
                condition=models.Q(monthly_frequency__in=[1, 2]),
                name="visit_assignment_frequency_1_or_2",
            ),
        ]

    def __str__(self):
        return f"{self.delegate} -> {self.doctor} ({self.monthly_frequency}/mois)"

    def to_record(self) -> VisitAssignmentRecord:
        return VisitAssignmentRecord(
            id=self.pk,
            delegate_id=self.delegate_id,
            doctor_id=self.doctor_id,
            monthly_frequency=self.monthly_frequency,
        )


class VisitEvent(TimeStampedModel):
    """One completed visit. Created through ``visits.services.record_visit`` only."""

    assignment = models.ForeignKey(
        VisitAssignment,
        on_delete=models.CASCADE,
        related_name="events",
        verbose_name="affectation",
    )
    visit_date = models.DateField("date de visite")
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recorded_visits",
        verbose_name="saisi par",
    )

    class Meta:
        verbose_name = "visite"
        verbose_name_plural = "visites"
        ordering = ["-visit_date"]
        constraints = [
            models.UniqueConstraint(
                fields=["assignment", "visit_date"],
                name="uniq_visit_event_per_day",
            ),
        ]

    def __str__(self):
        return f"{self.assignment.doctor} le {self.visit_date:%d/%m/%Y}"

    def to_record(self) -> VisitEventRecord:
        return VisitEventRecord(
            id=self.pk,
            assignment_id=self.assignment_id,
            date=self.visit_date,
        )
