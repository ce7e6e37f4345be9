"""
In-memory Event Broadcaster Implementation

Per-event pub/sub used by the reservation engine to announce availability
changes (update-ticket / update-event / update-seat) to websocket clients.
"""

from typing import Any, Dict, List

from anyio import BrokenResourceError, ClosedResourceError, WouldBlock, create_memory_object_stream
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.app.interface.i_broadcast_notifier import IBroadcastNotifier


_Subscriber = tuple[MemoryObjectSendStream[dict[str, Any]], MemoryObjectReceiveStream[dict[str, Any]]]


class InMemoryEventBroadcasterImpl(IBroadcastNotifier):
    """
    In-memory pub/sub keyed by event id

    Architecture:
    - Use case → publish() → subscriber streams → websocket forwarder
    - Each event_id has a list of subscriber stream tuples
    - Delivery is at-most-once: a full or closed stream drops the message

    Memory Management:
    - Stream buffer bounded by ``buffer_size``
    - Closed subscribers are pruned on publish
    - Empty subscriber lists are removed on unsubscribe
    """

    def __init__(self, *, buffer_size: int = 100) -> None:
        self._buffer_size = buffer_size
        self._subscribers: Dict[str, List[_Subscriber]] = {}

    async def subscribe(self, *, event_id: str) -> MemoryObjectReceiveStream[dict[str, Any]]:
        send_stream, receive_stream = create_memory_object_stream[dict[str, Any]](
            max_buffer_size=self._buffer_size
        )
        self._subscribers.setdefault(event_id, []).append((send_stream, receive_stream))

        Logger.base.debug(
            f'📡 [BROADCASTER] Subscribed to event {event_id} '
            f'(total subscribers: {len(self._subscribers[event_id])})'
        )
        return receive_stream

    async def publish(self, *, event_id: str, topic: str, payload: dict[str, Any]) -> None:
        subscribers = self._subscribers.get(event_id)
        if not subscribers:
            Logger.base.debug(f'📡 [BROADCASTER] No subscribers for event {event_id} ({topic})')
            return

        message = {'topic': topic, 'payload': payload}
        delivered = 0
        dropped = 0
        closed: list[_Subscriber] = []

        for subscriber in subscribers:
            send_stream, _ = subscriber
            try:
                send_stream.send_nowait(message)
                delivered += 1
            except WouldBlock:
                dropped += 1
                Logger.base.warning(
                    f'⚠️ [BROADCASTER] Stream full for event {event_id}, dropping {topic}'
                )
            except (BrokenResourceError, ClosedResourceError):
                closed.append(subscriber)

        for subscriber in closed:
            subscribers.remove(subscriber)
        if not subscribers:
            del self._subscribers[event_id]

        Logger.base.debug(
            f'📡 [BROADCASTER] {topic} to event {event_id}: '
            f'delivered={delivered}, dropped={dropped}, pruned={len(closed)}'
        )

    async def unsubscribe(
        self, *, event_id: str, stream: MemoryObjectReceiveStream[dict[str, Any]]
    ) -> None:
        subscribers = self._subscribers.get(event_id)
        if not subscribers:
            return

        for i, (send_stream, receive_stream) in enumerate(subscribers):
            if receive_stream is stream:
                await send_stream.aclose()
                await receive_stream.aclose()
                subscribers.pop(i)
                Logger.base.debug(
                    f'📡 [BROADCASTER] Unsubscribed from event {event_id} '
                    f'(remaining: {len(subscribers)})'
                )
                break

        if not subscribers:
            del self._subscribers[event_id]

    def subscriber_count(self, *, event_id: str) -> int:
        return len(self._subscribers.get(event_id, []))
