from rest_framework import serializers

from .models import OperationalUnit, Resident


class UnitSummarySerializer(serializers.ModelSerializer):
    project_id = serializers.IntegerField(read_only=True)
    project_name = serializers.CharField(source="project.name", read_only=True)

    class Meta:
        model = OperationalUnit
        fields = ("id", "code", "name", "project_id", "project_name")


class ResidentSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Resident
        fields = ("id", "name", "email", "phone", "whatsapp_phone")
