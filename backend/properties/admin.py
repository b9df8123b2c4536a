from django.contrib import admin

from .models import OperationalUnit, OwnerAssociation, Project, Resident


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "created_at")
    search_fields = ("code", "name")


@admin.register(OperationalUnit)
class OperationalUnitAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "project")
    list_filter = ("project",)
    search_fields = ("code", "name")


@admin.register(OwnerAssociation)
class OwnerAssociationAdmin(admin.ModelAdmin):
    list_display = ("name", "unit")
    search_fields = ("name", "unit__code")


@admin.register(Resident)
class ResidentAdmin(admin.ModelAdmin):
    list_display = ("name", "unit", "phone", "whatsapp_phone", "status")
    list_filter = ("status",)
    search_fields = ("name", "phone", "whatsapp_phone", "unit__code")
