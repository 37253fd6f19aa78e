# Generated manually

import accounts.managers
from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(
                    default=False,
                    help_text="Designates that this user has all permissions without explicitly assigning them.",
                    verbose_name="superuser status",
                )),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("is_staff", models.BooleanField(
                    default=False,
                    help_text="Designates whether the user can log into this admin site.",
                    verbose_name="staff status",
                )),
                ("is_active", models.BooleanField(
                    default=True,
                    help_text=(
                        "Designates whether this user should be treated as active. "
                        "Unselect this instead of deleting accounts."
                    ),
                    verbose_name="active",
                )),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("email", models.EmailField(max_length=254, unique=True)),
                (
                    "role",
                    models.CharField(
                        choices=[("DONOR", "Donor"), ("RECEIVER", "Receiver"), ("DRIVER", "Driver"), ("ADMIN", "Admin")],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                (
                    "approval_status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending approval"),
                            ("COMPLETED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("INACTIVE", "Inactive"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("contact_no", models.CharField(blank=True, max_length=32)),
                ("address", models.TextField(blank=True)),
                (
                    "donor_type",
                    models.CharField(
                        blank=True, choices=[("INDIVIDUAL", "Individual"), ("BUSINESS", "Business")], max_length=16
                    ),
                ),
                ("display_name", models.CharField(blank=True, max_length=150)),
                ("business_name", models.CharField(blank=True, max_length=255)),
                ("receiver_name", models.CharField(blank=True, max_length=255)),
                ("receiver_type", models.CharField(blank=True, max_length=64)),
                ("driver_name", models.CharField(blank=True, max_length=255)),
                ("vehicle_number", models.CharField(blank=True, max_length=32)),
                ("vehicle_type", models.CharField(blank=True, max_length=32)),
                ("driver_latitude", models.FloatField(blank=True, null=True)),
                ("driver_longitude", models.FloatField(blank=True, null=True)),
                ("driver_location_updated_at", models.DateTimeField(blank=True, null=True)),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text=(
                            "The groups this user belongs to. A user will get all permissions "
                            "granted to each of their groups."
                        ),
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["role", "approval_status"], name="accounts_us_role_status_idx")],
            },
            managers=[
                ("objects", accounts.managers.UserManager()),
            ],
        ),
    ]
