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
            name="DonationTrackingSequence",
            fields=[
                ("date_key", models.CharField(max_length=8, primary_key=True, serialize=False)),
                ("seq", models.PositiveIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name="Donation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tracking_id", models.CharField(max_length=32, unique=True)),
                (
                    "food_category",
                    models.CharField(
                        choices=[
                            ("Cooked Meals", "Cooked Meals"),
                            ("Raw Food", "Raw Food"),
                            ("Beverages", "Beverages"),
                            ("Snacks", "Snacks"),
                            ("Desserts", "Desserts"),
                        ],
                        max_length=32,
                    ),
                ),
                ("item_name", models.CharField(max_length=255)),
                ("quantity", models.PositiveIntegerField()),
                (
                    "storage_recommendation",
                    models.CharField(choices=[("Hot", "Hot"), ("Cold", "Cold"), ("Dry", "Dry")], max_length=8),
                ),
                ("image_url", models.CharField(max_length=500)),
                ("ai_confidence", models.FloatField(blank=True, null=True)),
                ("ai_quality_score", models.FloatField(blank=True, null=True)),
                (
                    "ai_freshness",
                    models.CharField(
                        blank=True, choices=[("Fresh", "Fresh"), ("Good", "Good"), ("Fair", "Fair")], max_length=8
                    ),
                ),
                ("ai_detected_items", models.JSONField(blank=True, default=list)),
                ("preferred_pickup_date", models.DateField()),
                ("preferred_pickup_time_from", models.CharField(max_length=16)),
                ("preferred_pickup_time_to", models.CharField(max_length=16)),
                ("actual_pickup_date", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                (
                    "product_type",
                    models.CharField(blank=True, choices=[("cooked", "Cooked"), ("packed", "Packed")], max_length=8),
                ),
                ("expiry_date", models.DateTimeField(db_index=True)),
                ("expiry_date_from_package", models.DateTimeField(blank=True, null=True)),
                ("donor_address", models.TextField()),
                ("donor_email", models.EmailField(max_length=254)),
                ("donor_latitude", models.FloatField(blank=True, null=True)),
                ("donor_longitude", models.FloatField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("assigned", "Assigned"),
                            ("picked_up", "Picked up"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("receiver_latitude", models.FloatField(blank=True, null=True)),
                ("receiver_longitude", models.FloatField(blank=True, null=True)),
                ("receiver_address", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "donor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="donations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "assigned_receiver",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="claimed_donations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "assigned_driver",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="driven_donations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["donor", "created_at"], name="donations_donor_created_idx"),
                    models.Index(fields=["status", "expiry_date"], name="donations_status_expiry_idx"),
                    models.Index(fields=["assigned_driver", "status"], name="donations_driver_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("assigned_driver__isnull", True), ("assigned_receiver__isnull", False), _connector="OR"),
                        name="donation_driver_requires_receiver",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ImpactReceipt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("drop_location", models.CharField(max_length=500)),
                ("people_fed", models.PositiveIntegerField()),
                ("weight_per_serving", models.DecimalField(decimal_places=3, max_digits=10)),
                ("distance_traveled", models.FloatField(default=0)),
                ("methane_saved", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "donation",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="impact_receipt",
                        to="donations.donation",
                    ),
                ),
                (
                    "receiver",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="impact_receipts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["receiver", "created_at"], name="donations_receipt_recv_idx")],
            },
        ),
    ]
