from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounts.models import User


class Donation(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        ASSIGNED = "assigned", "Assigned"
        PICKED_UP = "picked_up", "Picked up"
        DELIVERED = "delivered", "Delivered"
        CANCELLED = "cancelled", "Cancelled"

    class FoodCategory(models.TextChoices):
        COOKED_MEALS = "Cooked Meals", "Cooked Meals"
        RAW_FOOD = "Raw Food", "Raw Food"
        BEVERAGES = "Beverages", "Beverages"
        SNACKS = "Snacks", "Snacks"
        DESSERTS = "Desserts", "Desserts"

    class Storage(models.TextChoices):
        HOT = "Hot", "Hot"
        COLD = "Cold", "Cold"
        DRY = "Dry", "Dry"

    class ProductType(models.TextChoices):
        COOKED = "cooked", "Cooked"
        PACKED = "packed", "Packed"

    class Freshness(models.TextChoices):
        FRESH = "Fresh", "Fresh"
        GOOD = "Good", "Good"
        FAIR = "Fair", "Fair"

    CLAIMABLE = (Status.PENDING, Status.APPROVED)
    ACTIVE_FOR_DRIVER = (Status.ASSIGNED, Status.PICKED_UP)

    tracking_id = models.CharField(max_length=32, unique=True)
    donor = models.ForeignKey(User, on_delete=models.CASCADE, related_name="donations")

    food_category = models.CharField(max_length=32, choices=FoodCategory.choices)
    item_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    storage_recommendation = models.CharField(max_length=8, choices=Storage.choices)
    image_url = models.CharField(max_length=500)

    # advisory only; never consulted by lifecycle guards
    ai_confidence = models.FloatField(null=True, blank=True)
    ai_quality_score = models.FloatField(null=True, blank=True)
    ai_freshness = models.CharField(max_length=8, choices=Freshness.choices, blank=True)
    ai_detected_items = models.JSONField(default=list, blank=True)

    preferred_pickup_date = models.DateField()
    preferred_pickup_time_from = models.CharField(max_length=16)
    preferred_pickup_time_to = models.CharField(max_length=16)
    actual_pickup_date = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    product_type = models.CharField(max_length=8, choices=ProductType.choices, blank=True)
    expiry_date = models.DateTimeField(db_index=True)
    expiry_date_from_package = models.DateTimeField(null=True, blank=True)

    # copied from the donor profile at creation
    donor_address = models.TextField()
    donor_email = models.EmailField()
    donor_latitude = models.FloatField(null=True, blank=True)
    donor_longitude = models.FloatField(null=True, blank=True)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING, db_index=True)
    assigned_receiver = models.ForeignKey(User, on_delete=models.PROTECT, null=True, blank=True,
                                          related_name="claimed_donations")
    assigned_driver = models.ForeignKey(User, on_delete=models.PROTECT, null=True, blank=True,
                                        related_name="driven_donations")

    # delivery location confirmed at claim time, independent of the receiver's profile address
    receiver_latitude = models.FloatField(null=True, blank=True)
    receiver_longitude = models.FloatField(null=True, blank=True)
    receiver_address = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["donor", "created_at"], name="donations_donor_created_idx"),
            models.Index(fields=["status", "expiry_date"], name="donations_status_expiry_idx"),
            models.Index(fields=["assigned_driver", "status"], name="donations_driver_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(assigned_driver__isnull=True) | Q(assigned_receiver__isnull=False),
                name="donation_driver_requires_receiver",
            ),
        ]

    def __str__(self):
        return f"{self.tracking_id} {self.item_name} ({self.status})"

    def is_expired(self, now=None) -> bool:
        return self.expiry_date <= (now or timezone.now())

    @property
    def is_editable(self) -> bool:
        """Donor may edit/cancel until a driver commits to the job."""
        if self.status in self.CLAIMABLE:
            return True
        return self.status == self.Status.ASSIGNED and self.assigned_driver_id is None

    @classmethod
    def editable_q(cls) -> Q:
        return Q(status__in=cls.CLAIMABLE) | Q(status=cls.Status.ASSIGNED, assigned_driver__isnull=True)


class DonationTrackingSequence(models.Model):
    """Per-day counter behind FL-YYYYMMDD-NN tracking ids."""
    date_key = models.CharField(max_length=8, primary_key=True)  # YYYYMMDD
    seq = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.date_key}: {self.seq}"


class ImpactReceipt(models.Model):
    donation = models.OneToOneField(Donation, on_delete=models.CASCADE, related_name="impact_receipt")
    receiver = models.ForeignKey(User, on_delete=models.PROTECT, related_name="impact_receipts")

    drop_location = models.CharField(max_length=500)
    people_fed = models.PositiveIntegerField()
    weight_per_serving = models.DecimalField(max_digits=10, decimal_places=3)  # kg

    # derived at creation, never re-entered
    distance_traveled = models.FloatField(default=0)  # km
    methane_saved = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)  # kg

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["receiver", "created_at"], name="donations_receipt_recv_idx")]

    def __str__(self):
        return f"Receipt for donation {self.donation_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Impact receipts are immutable once created.")
        super().save(*args, **kwargs)

    @property
    def effective_methane_saved(self) -> Decimal:
        """Stored value, or re-derived for rows written before it was recorded."""
        if self.methane_saved:
            return self.methane_saved
        from .impact import methane_saved_kg
        return methane_saved_kg(self.donation.quantity, self.weight_per_serving)


def methane_factor() -> Decimal:
    return Decimal(str(settings.FOODLOOP_METHANE_FACTOR))
