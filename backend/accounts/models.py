"""
Accounts app models.

Defines a custom User model that extends Django's ``AbstractUser`` with a
fixed role and the station(s) the user is responsible for.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class UserRole(models.TextChoices):
    """
    Fixed set of roles.

    * ``ADMIN`` — unrestricted access to every station.
    * ``STATION_OFFICER`` — scoped to exactly one station (``User.station``).
    * ``SUBDIVISION_OFFICER`` — scoped to an explicit list of stations
      (``User.stations``).
    """

    ADMIN = "admin", "Administrator"
    STATION_OFFICER = "station_officer", "Station Officer"
    SUBDIVISION_OFFICER = "subdivision_officer", "Subdivision Officer"


class User(AbstractUser):
    """
    Custom user model for the FIR disposal tracker.

    Superusers are treated as administrators regardless of ``role``.
    """

    role = models.CharField(
        max_length=30,
        choices=UserRole.choices,
        default=UserRole.STATION_OFFICER,
        verbose_name="Role",
        db_index=True,
    )
    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="officers",
        verbose_name="Station",
        help_text="Station of a station officer.",
    )
    stations = models.ManyToManyField(
        "stations.Station",
        blank=True,
        related_name="subdivision_officers",
        verbose_name="Stations",
        help_text="Stations supervised by a subdivision officer.",
    )
    designation = models.CharField(
        max_length=100,
        blank=True,
        default="",
        verbose_name="Designation",
    )

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.role == UserRole.ADMIN

    @property
    def scoped_station_ids(self) -> set[int] | None:
        """
        Station ids this user may see or act on.

        ``None`` means unrestricted (administrators).  An empty set means
        the user is not attached to any station yet and sees nothing.
        """
        if self.is_admin:
            return None
        if self.role == UserRole.STATION_OFFICER:
            return {self.station_id} if self.station_id else set()
        if self.role == UserRole.SUBDIVISION_OFFICER:
            return set(self.stations.values_list("pk", flat=True))
        return set()
