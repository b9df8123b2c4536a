# servicedesk/views.py
"""
Dashboard views for tickets and delivery orders.

Project managers only see requests from units in their projects.
Resident accounts have no dashboard access; they file through the webhooks.
"""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require_project_access, resolve_actor, scope_to_projects
from .commands import open_ticket_from_phone
from .models import DeliveryOrder, Ticket
from .serializers import (
    DeliveryOrderSerializer,
    RequestFilterSerializer,
    TicketCreateSerializer,
    TicketSerializer,
)


def _scoped_requests(actor, queryset, params):
    filters = RequestFilterSerializer(data=params)
    filters.is_valid(raise_exception=True)
    ids = filters.validated_data

    queryset = scope_to_projects(actor, queryset, field="unit__project_id")

    if params.get("status"):
        queryset = queryset.filter(status=params["status"])
    if "unit_id" in ids:
        queryset = queryset.filter(unit_id=ids["unit_id"])
    # Cross-project filtering is an admin tool.
    if "project_id" in ids and actor.is_admin:
        queryset = queryset.filter(unit__project_id=ids["project_id"])
    return queryset.order_by("-created_at")


class TicketListCreateView(APIView):
    """
    GET /api/tickets/ -> filters: status, priority, unit_id, project_id (admin)
    POST /api/tickets/ -> {resident_phone, unit_code, project_id, description}
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)

        tickets = Ticket.objects.select_related("resident", "unit__project", "assigned_to")
        if request.query_params.get("priority"):
            tickets = tickets.filter(priority=request.query_params["priority"])
        tickets = _scoped_requests(actor, tickets, request.query_params)
        return Response(TicketSerializer(tickets, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = TicketCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        require_project_access(actor, data["project_id"])

        result = open_ticket_from_phone(
            data["project_id"],
            data["unit_code"],
            data["resident_phone"],
            data["description"],
            priority=data["priority"],
        )
        if not result.success:
            return Response(result.error_body(), status=result.http_status)
        return Response(TicketSerializer(result.data).data, status=status.HTTP_201_CREATED)


class DeliveryOrderListView(APIView):
    """GET /api/delivery-orders/ -> filters: status, unit_id, project_id (admin)"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)

        orders = DeliveryOrder.objects.select_related("resident", "unit__project", "assigned_to")
        orders = _scoped_requests(actor, orders, request.query_params)
        return Response(DeliveryOrderSerializer(orders, many=True).data)
