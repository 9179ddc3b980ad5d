from django.contrib import admin
from sharing.models import AccessGrant, Share


@admin.register(AccessGrant)
class AccessGrantAdmin(admin.ModelAdmin):
    list_display = ("user", "resource_type", "resource_id", "role", "is_active", "granted_at")
    list_filter = ("resource_type", "role", "is_active")
    search_fields = ("user__email", "resource_id")


@admin.register(Share)
class ShareAdmin(admin.ModelAdmin):
    list_display = ("shared_with_name", "shared_by_name", "resource_type", "role", "is_active", "shared_at")
    list_filter = ("resource_type", "role", "is_active")
    search_fields = ("shared_with__email", "shared_by__email")
