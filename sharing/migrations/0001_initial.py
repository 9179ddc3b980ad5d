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
            name="AccessGrant",
            fields=[
                ("uid", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("resource_id", models.UUIDField()),
                ("resource_type", models.CharField(choices=[("file", "File"), ("folder", "Folder")], max_length=10)),
                ("role", models.CharField(choices=[("viewer", "Viewer"), ("editor", "Editor"), ("admin", "Admin")], max_length=10)),
                ("granted_at", models.DateTimeField(auto_now_add=True)),
                ("is_active", models.BooleanField(default=True)),
                ("revoked_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(blank=True, null=True)),
                ("granted_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="issued_grants", to=settings.AUTH_USER_MODEL)),
                ("revoked_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="access_grants", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["resource_id", "resource_type", "is_active"], name="grant_resource_idx"),
                    models.Index(fields=["user", "is_active"], name="grant_user_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_active", True)),
                        fields=("user", "resource_id", "resource_type"),
                        name="unique_active_grant",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Share",
            fields=[
                ("uid", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("resource_id", models.UUIDField()),
                ("resource_type", models.CharField(choices=[("file", "File"), ("folder", "Folder")], max_length=10)),
                ("shared_by_name", models.CharField(blank=True, default="", max_length=255)),
                ("shared_with_name", models.CharField(blank=True, default="", max_length=255)),
                ("role", models.CharField(choices=[("viewer", "Viewer"), ("editor", "Editor"), ("admin", "Admin")], max_length=10)),
                ("inherit_to_children", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("shared_at", models.DateTimeField(auto_now_add=True)),
                ("revoked_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(blank=True, null=True)),
                ("grant", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="share", to="sharing.accessgrant")),
                ("shared_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="shares_made", to=settings.AUTH_USER_MODEL)),
                ("shared_with", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="shares_received", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-shared_at"],
                "indexes": [
                    models.Index(fields=["shared_by", "is_active"], name="share_by_idx"),
                    models.Index(fields=["shared_with", "is_active"], name="share_with_idx"),
                ],
            },
        ),
    ]
