import uuid
from .base import NotificationProvider

class MockProvider(NotificationProvider):
    channel = "mock"

    def send(self, recipient, event_type: str, payload: dict):
        # pretend it's sent and immediately 'SENT'
        return (f"mock-{uuid.uuid4()}", "sent")
