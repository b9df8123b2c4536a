from django.contrib import admin

from .models import WebhookApiKey, WebhookLog


@admin.register(WebhookApiKey)
class WebhookApiKeyAdmin(admin.ModelAdmin):
    list_display = ("name", "prefix", "role", "is_active", "created_at", "last_used_at")
    list_filter = ("role", "is_active")
    readonly_fields = ("prefix", "key_hash", "created_at", "last_used_at")


@admin.register(WebhookLog)
class WebhookLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "source", "event_type", "status", "status_code", "endpoint", "api_key")
    list_filter = ("source", "event_type", "status")
    readonly_fields = [f.name for f in WebhookLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
