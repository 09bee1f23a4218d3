"""
Stations app models.

The ``Station`` table is the single authoritative registry of police
stations.  Stations form a District → Subdivision → Station hierarchy;
special units (cyber crime, coastal security, ...) sit under the
``SPECIAL_UNIT`` district and use ``subdivision`` as a flat grouping label.
"""

from django.core.validators import RegexValidator
from django.db import models

from core.models import TimeStampedModel


class District(models.TextChoices):
    """Top level of the station hierarchy."""

    NORTH = "north_district", "North District"
    SOUTH = "south_district", "South District"
    SPECIAL_UNIT = "special_unit", "Special Unit"


station_code_validator = RegexValidator(
    regex=r"^[A-Z0-9]+$",
    message="Station code may only contain uppercase letters and digits.",
)


class Station(TimeStampedModel):
    """
    A police station (or special unit) that owns FIRs.

    Inactive stations are hidden from the registry, the hierarchy and
    every performance report.
    """

    name = models.CharField(
        max_length=150,
        unique=True,
        verbose_name="Station Name",
    )
    code = models.CharField(
        max_length=30,
        unique=True,
        validators=[station_code_validator],
        verbose_name="Station Code",
        help_text="Uppercase letters and digits only, e.g. PANAJIPS.",
    )
    subdivision = models.CharField(
        max_length=100,
        verbose_name="Subdivision",
        db_index=True,
        help_text="Subdivision name, or the unit grouping for special units.",
    )
    district = models.CharField(
        max_length=20,
        choices=District.choices,
        verbose_name="District",
        db_index=True,
    )
    address = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Address",
    )
    in_charge = models.CharField(
        max_length=150,
        blank=True,
        default="",
        verbose_name="Officer In Charge",
    )
    contact_number = models.CharField(
        max_length=20,
        blank=True,
        default="",
        verbose_name="Contact Number",
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name="Active",
    )

    class Meta:
        verbose_name = "Police Station"
        verbose_name_plural = "Police Stations"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["district", "subdivision"], name="stations_district_subdiv_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)
