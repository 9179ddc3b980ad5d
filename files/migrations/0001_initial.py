import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Folder",
            fields=[
                ("uid", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("path", models.TextField()),
                ("is_deleted", models.BooleanField(default=False)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="folders", to=settings.AUTH_USER_MODEL)),
                ("parent", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="children", to="files.folder")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["owner", "parent", "is_deleted"], name="folder_owner_parent_idx"),
                    models.Index(fields=["parent", "name"], name="folder_parent_name_idx"),
                    models.Index(fields=["is_deleted", "deleted_at"], name="folder_trash_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="File",
            fields=[
                ("uid", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("size", models.BigIntegerField(default=0)),
                ("mime_type", models.CharField(default="application/octet-stream", max_length=255)),
                ("extension", models.CharField(blank=True, default="", max_length=20)),
                ("storage_key", models.CharField(max_length=1024)),
                ("storage_id", models.CharField(blank=True, default="", max_length=255)),
                ("version", models.IntegerField(default=1)),
                ("is_deleted", models.BooleanField(default=False)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("folder", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="files", to="files.folder")),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="files", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["owner", "folder", "is_deleted"], name="file_owner_folder_idx"),
                    models.Index(fields=["folder", "name"], name="file_folder_name_idx"),
                    models.Index(fields=["is_deleted", "deleted_at"], name="file_trash_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="FileVersion",
            fields=[
                ("uid", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("version_number", models.IntegerField()),
                ("size", models.BigIntegerField(default=0)),
                ("storage_key", models.CharField(max_length=1024)),
                ("storage_id", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField()),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("file", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="versions", to="files.file")),
            ],
            options={
                "ordering": ["-version_number"],
                "indexes": [
                    models.Index(fields=["file", "version_number"], name="fileversion_file_number_idx"),
                ],
            },
        ),
    ]
