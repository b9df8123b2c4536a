from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import ProjectAssignment, User


class ProjectAssignmentInline(admin.TabularInline):
    model = ProjectAssignment
    extra = 0
    autocomplete_fields = ("project",)


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password", "name")}),
        ("Role", {"fields": ("role", "whatsapp_phone", "can_view_all_projects")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "name", "role", "password1", "password2")}),
    )
    list_display = ("email", "name", "role", "whatsapp_phone", "is_active")
    list_filter = ("role", "is_active")
    search_fields = ("email", "name", "whatsapp_phone")
    ordering = ("email",)
    inlines = [ProjectAssignmentInline]
