"""
Broadcast Notifier Interface

Fire-and-forget publication of availability changes to every client of an
event. Lost messages only make other clients' displays stale.
"""

from abc import ABC, abstractmethod
from typing import Any


class IBroadcastNotifier(ABC):
    @abstractmethod
    async def publish(self, *, event_id: str, topic: str, payload: dict[str, Any]) -> None:
        pass
