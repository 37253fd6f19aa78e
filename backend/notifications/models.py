from django.conf import settings
from django.db import models
from django.utils import timezone


class EventType(models.TextChoices):
    DONATION_CREATED = "donation_created", "Donation created"
    DONATION_CLAIMED = "donation_claimed", "Donation claimed"
    DRIVER_ACCEPTED = "driver_accepted", "Driver accepted"
    PICKUP_CONFIRMED = "pickup_confirmed", "Pickup confirmed"
    DELIVERY_CONFIRMED = "delivery_confirmed", "Delivery confirmed"
    DONATION_EXPIRING = "donation_expiring", "Donation expiring"
    DONATION_DELETED = "donation_deleted", "Donation deleted"


class NotificationLog(models.Model):
    """One row per (event, recipient). Written after the transition commits."""

    class Status(models.TextChoices):
        QUEUED = "QUEUED", "Queued"
        SENT = "SENT", "Sent"
        FAILED = "FAILED", "Failed"

    event_type = models.CharField(max_length=32, choices=EventType.choices, db_index=True)
    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")

    # plain id, not a FK: expired donations are hard-deleted but their notifications stay
    donation_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    payload = models.JSONField(blank=True, default=dict)

    channel = models.CharField(max_length=16, default="mock")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.QUEUED)
    provider_msg_id = models.CharField(max_length=128, blank=True)
    error = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["recipient", "created_at"], name="notif_recipient_created_idx"),
            models.Index(fields=["status", "created_at"], name="notif_status_created_idx"),
        ]

    def __str__(self):
        return f"{self.event_type} -> {self.recipient_id} {self.status}"
