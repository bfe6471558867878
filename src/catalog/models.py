"""Models for the catalog app (doctors, territory bricks, promoted products)."""
from django.db import models

from core.models import TimeStampedModel


# ---------------------------------------------------------------------------
# Brick
# ---------------------------------------------------------------------------

class Brick(TimeStampedModel):
    """Territory unit a doctor practices in."""

    name = models.CharField("nom", max_length=120)
    region = models.CharField("region", max_length=120, blank=True, default="")

    class Meta:
        verbose_name = "brick"
        verbose_name_plural = "bricks"
        ordering = ["region", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["region", "name"],
                name="uniq_brick_per_region",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.region})" if self.region else self.name


# ---------------------------------------------------------------------------
# Doctor
# ---------------------------------------------------------------------------

class Doctor(TimeStampedModel):
    """Healthcare professional visited by delegates."""

    class Specialty(models.TextChoices):
        GENERALIST = "generaliste", "Medecin generaliste"
        CARDIOLOGIST = "cardiologue", "Cardiologue"
        PULMONOLOGIST = "pneumologue", "Pneumologue"
        INTERNIST = "interniste", "Interniste"

    first_name = models.CharField("prenom", max_length=150, blank=True, default="")
    last_name = models.CharField("nom", max_length=150)
    specialty = models.CharField(
        "specialite",
        max_length=20,
        choices=Specialty.choices,
        default=Specialty.GENERALIST,
    )
    brick = models.ForeignKey(
        Brick,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="doctors",
        verbose_name="brick",
    )
    is_active = models.BooleanField("actif", default=True)

    class Meta:
        verbose_name = "medecin"
        verbose_name_plural = "medecins"
        ordering = ["last_name", "first_name"]

    def __str__(self):
        return f"Dr {self.first_name} {self.last_name}".replace("  ", " ").strip()


# ---------------------------------------------------------------------------
# Product
# ---------------------------------------------------------------------------

class Product(TimeStampedModel):
    """Promoted product carrying sales targets."""

    name = models.CharField("nom", max_length=255, unique=True)
    is_active = models.BooleanField("actif", default=True)

    class Meta:
        verbose_name = "produit"
        verbose_name_plural = "produits"
        ordering = ["name"]

    def __str__(self):
        return self.name
