from django.contrib import admin
from files.models import File, FileVersion, Folder


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin):
    list_display = ("path", "owner", "is_deleted", "deleted_at", "created_at")
    list_filter = ("is_deleted",)
    search_fields = ("name", "path", "owner__email")


class FileVersionInline(admin.TabularInline):
    model = FileVersion
    fk_name = "file"
    extra = 0
    readonly_fields = ("version_number", "size", "storage_key", "created_at", "created_by")


@admin.register(File)
class FileAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "folder", "size", "version", "is_deleted")
    list_filter = ("is_deleted", "mime_type")
    search_fields = ("name", "owner__email")
    inlines = [FileVersionInline]
