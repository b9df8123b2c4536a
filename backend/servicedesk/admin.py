from django.contrib import admin

from .models import DeliveryOrder, Ticket


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ("ticket_number", "title", "unit", "resident", "status", "priority", "assigned_to", "created_at")
    list_filter = ("status", "priority")
    search_fields = ("title", "description", "resident__name", "unit__code")
    readonly_fields = ("public_id", "created_at", "updated_at")


@admin.register(DeliveryOrder)
class DeliveryOrderAdmin(admin.ModelAdmin):
    list_display = ("title", "unit", "resident", "status", "assigned_to", "created_at")
    list_filter = ("status",)
    search_fields = ("title", "description", "resident__name", "unit__code")
    readonly_fields = ("public_id", "created_at", "updated_at")
