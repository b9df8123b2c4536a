from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from properties.serializers import ResidentSummarySerializer, UnitSummarySerializer
from .models import DeliveryOrder, Ticket


class TicketSerializer(serializers.ModelSerializer):
    resident = ResidentSummarySerializer(read_only=True)
    unit = UnitSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)

    class Meta:
        model = Ticket
        fields = (
            "id",
            "public_id",
            "ticket_number",
            "title",
            "description",
            "status",
            "priority",
            "resident",
            "unit",
            "assigned_to",
            "created_at",
        )
        read_only_fields = fields


class DeliveryOrderSerializer(serializers.ModelSerializer):
    resident = ResidentSummarySerializer(read_only=True)
    unit = UnitSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)

    class Meta:
        model = DeliveryOrder
        fields = (
            "id",
            "public_id",
            "title",
            "description",
            "status",
            "resident",
            "unit",
            "assigned_to",
            "created_at",
        )
        read_only_fields = fields


class TicketCreateSerializer(serializers.Serializer):
    resident_phone = serializers.CharField()
    unit_code = serializers.CharField()
    project_id = serializers.IntegerField()
    description = serializers.CharField()
    priority = serializers.CharField(required=False, allow_blank=True, default="Normal")


class RequestFilterSerializer(serializers.Serializer):
    """Query-string ids accepted by the ticket and delivery order lists."""
    unit_id = serializers.IntegerField(required=False)
    project_id = serializers.IntegerField(required=False)
