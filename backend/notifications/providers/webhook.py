import requests
from django.conf import settings

from .base import NotificationProvider

class WebhookProvider(NotificationProvider):
    """
    Posts the event to a realtime gateway (socket fan-out lives on the other side).
    Requires:
      NOTIFICATION_WEBHOOK_URL (NOTIFICATION_WEBHOOK_TOKEN optional)
    """
    channel = "webhook"

    def __init__(self):
        self.url = settings.NOTIFICATION_WEBHOOK_URL
        self.token = settings.NOTIFICATION_WEBHOOK_TOKEN
        if not self.url:
            raise RuntimeError("Webhook provider missing NOTIFICATION_WEBHOOK_URL")

    def send(self, recipient, event_type: str, payload: dict):
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        body = {"event": event_type, "userId": recipient.pk, "data": payload}
        r = requests.post(self.url, json=body, headers=headers, timeout=10)
        r.raise_for_status()
        try:
            data = r.json()
        except ValueError:
            data = {}
        return (str(data.get("id", "")), "sent")
