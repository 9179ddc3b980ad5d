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
            name="Notification",
            fields=[
                ("uid", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("type", models.CharField(choices=[("file_shared", "File shared"), ("folder_shared", "Folder shared"), ("share_updated", "Share updated"), ("share_revoked", "Share revoked")], max_length=50)),
                ("title", models.CharField(max_length=255)),
                ("message", models.TextField()),
                ("related_item_id", models.UUIDField(blank=True, null=True)),
                ("related_item_type", models.CharField(blank=True, default="", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("read", models.BooleanField(default=False)),
                ("recipient", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["recipient", "read"], name="notification_unread_idx"),
                ],
            },
        ),
    ]
