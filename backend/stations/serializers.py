"""
Stations app serializers.

Read-only: stations are maintained through the Django admin and the
``seed_stations`` command.
"""

from rest_framework import serializers

from .models import District, Station


class StationSerializer(serializers.ModelSerializer):
    district_display = serializers.CharField(source="get_district_display", read_only=True)

    class Meta:
        model = Station
        fields = [
            "id",
            "name",
            "code",
            "subdivision",
            "district",
            "district_display",
            "address",
            "in_charge",
            "contact_number",
            "is_active",
        ]
        read_only_fields = fields


class StationFilterSerializer(serializers.Serializer):
    subdivision = serializers.CharField(required=False, max_length=100)
    district = serializers.ChoiceField(choices=District.choices, required=False)


class HierarchyStationSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    code = serializers.CharField()


class HierarchySubdivisionSerializer(serializers.Serializer):
    name = serializers.CharField(help_text="Subdivision, or unit grouping for special units.")
    stations = HierarchyStationSerializer(many=True)


class HierarchyDistrictSerializer(serializers.Serializer):
    """
    One district of ``GET /api/stations/hierarchy/``.

    Example::

        {
            "district": "special_unit",
            "label": "Special Unit",
            "is_special_unit": true,
            "subdivisions": [
                {"name": "Cyber Crime", "stations": [{"id": 30, "name": "CCPS", "code": "CCPS"}]}
            ]
        }
    """

    district = serializers.CharField()
    label = serializers.CharField()
    is_special_unit = serializers.BooleanField()
    subdivisions = HierarchySubdivisionSerializer(many=True)
