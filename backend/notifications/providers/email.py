from django.conf import settings
from django.core.mail import send_mail

from .base import NotificationProvider

SUBJECTS = {
    "donation_created": "Your donation {tracking_id} is listed",
    "donation_claimed": "Donation {tracking_id} has been claimed",
    "driver_accepted": "A driver accepted donation {tracking_id}",
    "pickup_confirmed": "Donation {tracking_id} has been picked up",
    "delivery_confirmed": "Donation {tracking_id} has been delivered",
    "donation_expiring": "Your donations are about to expire",
    "donation_deleted": "Donation {tracking_id} expired and was removed",
}

class EmailProvider(NotificationProvider):
    """Plain-text mail through Django's configured EMAIL_BACKEND."""
    channel = "email"

    def send(self, recipient, event_type: str, payload: dict):
        if not recipient.email:
            raise ValueError("Recipient has no email address")
        subject = SUBJECTS.get(event_type, event_type).format(tracking_id=payload.get("tracking_id") or "")
        lines = [f"{k}: {v}" for k, v in payload.items() if v not in (None, "")]
        sent = send_mail(subject, "\n".join(lines), settings.DEFAULT_FROM_EMAIL, [recipient.email])
        return ("", "sent" if sent else "failed")
