"""Models for the field force organization (delegates, supervisors, directors)."""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from core.models import TimeStampedModel
from performance.records import HierarchyNodeRecord


class Delegate(TimeStampedModel):
    """A member of the field force hierarchy.

    Every delegate reports to at most one supervisor and every supervisor to at
    most one sales director, through the same ``supervisor`` edge.
    """

    class Role(models.TextChoices):
        DELEGATE = "DELEGATE", "Delegue medical"
        SUPERVISOR = "SUPERVISOR", "Superviseur"
        SALES_DIRECTOR = "SALES_DIRECTOR", "Directeur des ventes"

    # Role expected on the supervisor edge for each role.
    EXPECTED_SUPERVISOR_ROLE = {
        Role.DELEGATE: Role.SUPERVISOR,
        Role.SUPERVISOR: Role.SALES_DIRECTOR,
        Role.SALES_DIRECTOR: None,
    }

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="delegate_profile",
        verbose_name="utilisateur",
    )
    first_name = models.CharField("prenom", max_length=150)
    last_name = models.CharField("nom", max_length=150)
    role = models.CharField(
        "role",
        max_length=20,
        choices=Role.choices,
        default=Role.DELEGATE,
    )
    supervisor = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="team_members",
        verbose_name="superieur hierarchique",
    )
    is_active = models.BooleanField("actif", default=True)

    class Meta:
        verbose_name = "delegue"
        verbose_name_plural = "delegues"
        ordering = ["last_name", "first_name"]
        indexes = [
            models.Index(fields=["role", "is_active"], name="delegate_role_active_idx"),
            models.Index(fields=["supervisor", "is_active"], name="delegate_supervisor_idx"),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.get_role_display()})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def clean(self):
        # Unattached members are allowed; they are the root of their own tree.
        if self.supervisor_id is None:
            return

        if self.pk and self.supervisor_id == self.pk:
            raise ValidationError({"supervisor": "Un membre ne peut pas etre son propre superieur."})

        expected = self.EXPECTED_SUPERVISOR_ROLE.get(self.role)
        if expected is None:
            raise ValidationError(
                {"supervisor": "Un directeur des ventes ne peut pas avoir de superieur."}
            )
        if self.supervisor.role != expected:
            raise ValidationError(
                {"supervisor": f"Le superieur doit avoir le role {self.Role(expected).label}."}
            )

        seen = {self.pk}
        current = self.supervisor
        while current is not None:
            if current.pk in seen:
                raise ValidationError({"supervisor": "Cycle detecte dans la hierarchie."})
            seen.add(current.pk)
            current = current.supervisor

    def to_record(self) -> HierarchyNodeRecord:
        return HierarchyNodeRecord(
            id=self.pk,
            supervisor_id=self.supervisor_id,
            role=self.role,
            name=self.full_name,
        )
