"""
In-memory Event Broadcaster Interface

Pub/sub channel per ticketing event. The reservation engine publishes
availability changes; every websocket connection of that event subscribes.
"""

from typing import Any, Protocol

from anyio.streams.memory import MemoryObjectReceiveStream


class IInMemoryEventBroadcaster(Protocol):
    """
    Interface for in-memory event broadcasting

    Messages are dicts of the form ``{'topic': str, 'payload': dict}``.
    """

    async def subscribe(self, *, event_id: str) -> MemoryObjectReceiveStream[dict[str, Any]]:
        """
        Subscribe to the channel of one ticketing event

        Args:
            event_id: Event the connection is shopping for

        Returns:
            MemoryObjectReceiveStream receiving broadcast messages
        """
        ...

    async def publish(self, *, event_id: str, topic: str, payload: dict[str, Any]) -> None:
        """
        Publish a message to all subscribers of the event

        Note:
            - Fire-and-forget: never raises for slow or closed subscribers
            - Silently ignores events without subscribers
        """
        ...

    async def unsubscribe(
        self, *, event_id: str, stream: MemoryObjectReceiveStream[dict[str, Any]]
    ) -> None:
        """
        Unsubscribe and close the stream

        Note:
            - Safe to call with a stream that is no longer registered
        """
        ...
