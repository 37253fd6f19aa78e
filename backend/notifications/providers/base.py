from abc import ABC, abstractmethod
from typing import Dict, Tuple

class NotificationProvider(ABC):
    channel = "base"

    @abstractmethod
    def send(self, recipient, event_type: str, payload: Dict) -> Tuple[str, str]:
        """
        Returns (provider_msg_id, provider_status)
        payload is what the emitter stored on the NotificationLog row.
        """
        raise NotImplementedError
