# Generated manually

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="NotificationLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("donation_created", "Donation created"),
                            ("donation_claimed", "Donation claimed"),
                            ("driver_accepted", "Driver accepted"),
                            ("pickup_confirmed", "Pickup confirmed"),
                            ("delivery_confirmed", "Delivery confirmed"),
                            ("donation_expiring", "Donation expiring"),
                            ("donation_deleted", "Donation deleted"),
                        ],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                ("donation_id", models.BigIntegerField(blank=True, db_index=True, null=True)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("channel", models.CharField(default="mock", max_length=16)),
                (
                    "status",
                    models.CharField(
                        choices=[("QUEUED", "Queued"), ("SENT", "Sent"), ("FAILED", "Failed")],
                        default="QUEUED",
                        max_length=16,
                    ),
                ),
                ("provider_msg_id", models.CharField(blank=True, max_length=128)),
                ("error", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "recipient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["recipient", "created_at"], name="notif_recipient_created_idx"),
                    models.Index(fields=["status", "created_at"], name="notif_status_created_idx"),
                ],
            },
        ),
    ]
