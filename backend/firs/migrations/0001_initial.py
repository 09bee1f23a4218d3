import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("stations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FIR",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                (
                    "fir_number",
                    models.CharField(
                        help_text="e.g. 123/2025. Immutable after creation.",
                        max_length=50,
                        unique=True,
                        validators=[
                            django.core.validators.RegexValidator(
                                message="FIR number may only contain letters, digits, '/' and '-'.",
                                regex="^[A-Za-z0-9/-]+$",
                            )
                        ],
                        verbose_name="FIR Number",
                    ),
                ),
                ("filing_date", models.DateField(db_index=True, verbose_name="Filing Date")),
                (
                    "seriousness_days",
                    models.PositiveSmallIntegerField(
                        choices=[(60, "60 days"), (90, "90 days"), (180, "180 days")],
                        help_text="Statutory disposal window in days.",
                        verbose_name="Seriousness Class",
                    ),
                ),
                ("disposal_due_date", models.DateField(db_index=True, editable=False, verbose_name="Disposal Due Date")),
                (
                    "disposal_status",
                    models.CharField(
                        choices=[
                            ("registered", "Registered"),
                            ("chargesheeted", "Chargesheeted"),
                            ("finalized", "Finalized"),
                        ],
                        db_index=True,
                        default="registered",
                        max_length=20,
                        verbose_name="Disposal Status",
                    ),
                ),
                ("disposal_date", models.DateField(blank=True, null=True, verbose_name="Disposal Date")),
                ("description", models.TextField(blank=True, default="", verbose_name="Description")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="Active")),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="created_firs",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Created By",
                    ),
                ),
                (
                    "police_station",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="firs",
                        to="stations.station",
                        verbose_name="Police Station",
                    ),
                ),
            ],
            options={
                "verbose_name": "FIR",
                "verbose_name_plural": "FIRs",
                "ordering": ["-filing_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["police_station", "disposal_status"], name="firs_station_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("disposal_date__isnull", True), ("disposal_date__gte", models.F("filing_date")), _connector="OR"),
                        name="fir_disposal_not_before_filing",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("disposal_status", "registered"), ("disposal_date__isnull", True)),
                            models.Q(models.Q(("disposal_status", "registered"), _negated=True), ("disposal_date__isnull", False)),
                            _connector="OR",
                        ),
                        name="fir_disposal_date_matches_status",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChargeSection",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("act", models.CharField(help_text="e.g. BNS, NDPS Act.", max_length=100, verbose_name="Act")),
                ("section", models.CharField(max_length=50, verbose_name="Section")),
                ("position", models.PositiveSmallIntegerField(default=0, verbose_name="Position")),
                (
                    "fir",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="charge_sections",
                        to="firs.fir",
                        verbose_name="FIR",
                    ),
                ),
            ],
            options={
                "verbose_name": "Charge Section",
                "verbose_name_plural": "Charge Sections",
                "ordering": ["position", "id"],
            },
        ),
        migrations.CreateModel(
            name="FIRRemark",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("remark", models.TextField(verbose_name="Remark")),
                (
                    "added_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="fir_remarks",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Added By",
                    ),
                ),
                (
                    "fir",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="remarks",
                        to="firs.fir",
                        verbose_name="FIR",
                    ),
                ),
            ],
            options={
                "verbose_name": "FIR Remark",
                "verbose_name_plural": "FIR Remarks",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
