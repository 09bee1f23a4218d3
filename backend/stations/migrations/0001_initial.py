import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Station",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("name", models.CharField(max_length=150, unique=True, verbose_name="Station Name")),
                (
                    "code",
                    models.CharField(
                        help_text="Uppercase letters and digits only, e.g. PANAJIPS.",
                        max_length=30,
                        unique=True,
                        validators=[
                            django.core.validators.RegexValidator(
                                message="Station code may only contain uppercase letters and digits.",
                                regex="^[A-Z0-9]+$",
                            )
                        ],
                        verbose_name="Station Code",
                    ),
                ),
                (
                    "subdivision",
                    models.CharField(
                        db_index=True,
                        help_text="Subdivision name, or the unit grouping for special units.",
                        max_length=100,
                        verbose_name="Subdivision",
                    ),
                ),
                (
                    "district",
                    models.CharField(
                        choices=[
                            ("north_district", "North District"),
                            ("south_district", "South District"),
                            ("special_unit", "Special Unit"),
                        ],
                        db_index=True,
                        max_length=20,
                        verbose_name="District",
                    ),
                ),
                ("address", models.CharField(blank=True, default="", max_length=255, verbose_name="Address")),
                ("in_charge", models.CharField(blank=True, default="", max_length=150, verbose_name="Officer In Charge")),
                ("contact_number", models.CharField(blank=True, default="", max_length=20, verbose_name="Contact Number")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
            ],
            options={
                "verbose_name": "Police Station",
                "verbose_name_plural": "Police Stations",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["district", "subdivision"], name="stations_district_subdiv_idx"),
                ],
            },
        ),
    ]
