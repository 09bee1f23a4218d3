"""
Management command: seed_stations
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Seeds the ``Station`` registry with the Goa Police hierarchy.

``STATION_HIERARCHY`` below is the only place the station list is spelled
out.  Everything else (hierarchy endpoint, reports, scoping) reads the
``Station`` table.

The command is **idempotent** — safe to run multiple times.  Existing
stations (matched by name) have their subdivision, district and code
brought in line with the mapping below; nothing is deleted.

Usage::

    python manage.py seed_stations
"""

import re

from django.core.management.base import BaseCommand
from django.db import transaction

from stations.models import District, Station

# ────────────────────────────────────────────────────────────────────
# District → Subdivision (or special-unit group) → Station names
# ────────────────────────────────────────────────────────────────────

STATION_HIERARCHY: dict[str, dict[str, list[str]]] = {
    District.NORTH: {
        "Panaji": ["Panaji PS", "Old Goa PS", "Agacaim PS"],
        "Mapusa": ["Mapusa PS", "Anjuna PS", "Colvale PS"],
        "Bicholim": ["Bicholim PS", "Valpoi PS"],
        "Pernem": ["Pernem PS", "Mandrem PS", "Mopa PS"],
        "Porvorim": ["Porvorim PS", "Calangute PS", "Saligao PS"],
    },
    District.SOUTH: {
        "Margao": [
            "Margao Town PS", "Maina Curtorim PS", "Fatorda PS",
            "Colva PS", "Cuncolim PS",
        ],
        "Quepem": ["Quepem PS", "Sanguem PS", "Curchorem PS"],
        "Vasco": [
            "Vasco PS", "Verna PS", "Dabolim Airport PS",
            "Mormugao PS", "Vasco Railway PS",
        ],
        "Ponda": ["Ponda PS", "Mardol PS", "Collem PS"],
        "Canacona": ["Canacona PS"],
    },
    District.SPECIAL_UNIT: {
        "Anti Narcotics Cell": ["ANCPS"],
        "Crime Branch": ["CBPS"],
        "Economic Offence Cell": ["EOC PS"],
        "SIT (Land Grabbing)": ["SIT (LAND GRABBING)"],
        "Konkan Railway": ["Konkan Railway PS"],
        "Cyber Crime": ["CCPS"],
        "Coastal Security": [
            "Betul Coastal PS", "Chapora Coastal PS", "Panji Coastal PS",
            "Tiracol Coastal PS", "Siolim Coastal PS", "Talpona Coastal PS",
            "Harbour Coastal PS",
        ],
        "Women Safety": ["WSPS"],
    },
}


def station_code_for(name: str) -> str:
    """``"Old Goa PS"`` → ``"OLDGOAPS"``."""
    return re.sub(r"[^A-Z0-9]", "", name.upper())


class Command(BaseCommand):
    help = "Seed the police station registry with the Goa station hierarchy."

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n══════════════════════════════════════════"
            "\n  Station Registry — Seeding Stations"
            "\n══════════════════════════════════════════\n"
        ))

        created_count = 0
        updated_count = 0

        with transaction.atomic():
            for district, groups in STATION_HIERARCHY.items():
                for subdivision, names in groups.items():
                    for name in names:
                        defaults = {
                            "code": station_code_for(name),
                            "subdivision": subdivision,
                            "district": district,
                        }
                        station, created = Station.objects.get_or_create(
                            name=name, defaults=defaults,
                        )
                        if created:
                            created_count += 1
                            action = "Created"
                        else:
                            changed = [
                                field for field, value in defaults.items()
                                if getattr(station, field) != value
                            ]
                            if not changed:
                                continue
                            for field in changed:
                                setattr(station, field, defaults[field])
                            station.save(update_fields=[*changed, "updated_at"])
                            updated_count += 1
                            action = "Updated"

                        self.stdout.write(self.style.SUCCESS(
                            f"  ✔  {action} station: {name:<24s} "
                            f"({subdivision}, {District(district).label})"
                        ))

        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n──────────────────────────────────────────"
        ))
        self.stdout.write(self.style.SUCCESS(
            f"  Done!  {created_count} station(s) created, "
            f"{updated_count} station(s) updated.\n"
        ))
