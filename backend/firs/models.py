"""
FIRs app models.

An ``FIR`` (First Information Report) is the unit of work: it is filed at
a station, gets a statutory disposal deadline fixed at filing, and moves
forward through Registered → Chargesheeted → Finalized.
"""

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models
from django.db.models import F, Q

from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class SeriousnessClass(models.IntegerChoices):
    """
    Statutory disposal window.  The *integer value* is the number of
    calendar days between filing and the disposal due date.
    """

    DAYS_60 = 60, "60 days"
    DAYS_90 = 90, "90 days"
    DAYS_180 = 180, "180 days"


class DisposalStatus(models.TextChoices):
    """Forward-only disposal pipeline."""

    REGISTERED = "registered", "Registered"
    CHARGESHEETED = "chargesheeted", "Chargesheeted"
    FINALIZED = "finalized", "Finalized"


class UrgencyTier(models.TextChoices):
    """
    Urgency of a Registered FIR by days remaining until its due date.

    Declared from least to most urgent.  Not stored: derived on read by
    ``firs.services.UrgencyClassifierService``.
    """

    SAFE = "safe", "Safe (Green)"
    YELLOW = "yellow", "Yellow"
    ORANGE = "orange", "Orange"
    RED = "red", "Red"
    EXCEEDED = "exceeded", "Exceeded (Red+)"


fir_number_validator = RegexValidator(
    regex=r"^[A-Za-z0-9/-]+$",
    message="FIR number may only contain letters, digits, '/' and '-'.",
)


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class FIR(TimeStampedModel):
    """
    A First Information Report.

    * ``disposal_due_date`` is computed once at creation from
      ``filing_date`` + ``seriousness_days`` and never recomputed.
    * ``disposal_status`` and ``disposal_date`` change only through
      ``firs.services.DisposalService``.
    * Inactive (soft-deleted) FIRs are excluded from every list and report.
    """

    fir_number = models.CharField(
        max_length=50,
        unique=True,
        validators=[fir_number_validator],
        verbose_name="FIR Number",
        help_text="e.g. 123/2025. Immutable after creation.",
    )
    police_station = models.ForeignKey(
        "stations.Station",
        on_delete=models.PROTECT,
        related_name="firs",
        verbose_name="Police Station",
    )
    filing_date = models.DateField(
        verbose_name="Filing Date",
        db_index=True,
    )
    seriousness_days = models.PositiveSmallIntegerField(
        choices=SeriousnessClass.choices,
        verbose_name="Seriousness Class",
        help_text="Statutory disposal window in days.",
    )
    disposal_due_date = models.DateField(
        editable=False,
        verbose_name="Disposal Due Date",
        db_index=True,
    )
    disposal_status = models.CharField(
        max_length=20,
        choices=DisposalStatus.choices,
        default=DisposalStatus.REGISTERED,
        verbose_name="Disposal Status",
        db_index=True,
    )
    disposal_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="Disposal Date",
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name="Active",
        db_index=True,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_firs",
        verbose_name="Created By",
    )

    class Meta:
        verbose_name = "FIR"
        verbose_name_plural = "FIRs"
        ordering = ["-filing_date", "-created_at"]
        indexes = [
            models.Index(fields=["police_station", "disposal_status"], name="firs_station_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(disposal_date__isnull=True) | Q(disposal_date__gte=F("filing_date")),
                name="fir_disposal_not_before_filing",
            ),
            models.CheckConstraint(
                condition=(
                    Q(disposal_status=DisposalStatus.REGISTERED, disposal_date__isnull=True)
                    | (~Q(disposal_status=DisposalStatus.REGISTERED) & Q(disposal_date__isnull=False))
                ),
                name="fir_disposal_date_matches_status",
            ),
        ]

    def __str__(self):
        return f"FIR {self.fir_number} [{self.get_disposal_status_display()}]"


class ChargeSection(models.Model):
    """One (act, section) pair charged in an FIR, kept in entry order."""

    fir = models.ForeignKey(
        FIR,
        on_delete=models.CASCADE,
        related_name="charge_sections",
        verbose_name="FIR",
    )
    act = models.CharField(
        max_length=100,
        verbose_name="Act",
        help_text="e.g. BNS, NDPS Act.",
    )
    section = models.CharField(
        max_length=50,
        verbose_name="Section",
    )
    position = models.PositiveSmallIntegerField(
        default=0,
        verbose_name="Position",
    )

    class Meta:
        verbose_name = "Charge Section"
        verbose_name_plural = "Charge Sections"
        ordering = ["position", "id"]

    def __str__(self):
        return f"{self.act} s.{self.section}"


class FIRRemark(TimeStampedModel):
    """
    Append-only note on an FIR.  Remarks are never edited or deleted
    through the API.
    """

    fir = models.ForeignKey(
        FIR,
        on_delete=models.CASCADE,
        related_name="remarks",
        verbose_name="FIR",
    )
    remark = models.TextField(verbose_name="Remark")
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="fir_remarks",
        verbose_name="Added By",
    )

    class Meta:
        verbose_name = "FIR Remark"
        verbose_name_plural = "FIR Remarks"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Remark on {self.fir.fir_number} by {self.added_by}"
