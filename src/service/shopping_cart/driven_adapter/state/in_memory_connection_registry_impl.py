"""
In-memory Connection Registry

Live connections of this process, indexed by connection id and by event.
Single event loop: plain dicts, no locking.
"""

from typing import Dict, List, Optional

from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.app.interface.i_connection_registry import IConnectionRegistry
from src.service.shopping_cart.domain.entity.connection_session_entity import ConnectionSession
from src.service.shopping_cart.domain.enum import OrderFrom


class InMemoryConnectionRegistryImpl(IConnectionRegistry):
    def __init__(self) -> None:
        self._sessions: Dict[str, ConnectionSession] = {}
        self._by_event: Dict[str, Dict[str, ConnectionSession]] = {}

    def register(
        self,
        *,
        connection_id: str,
        event_id: str,
        order_from: OrderFrom = OrderFrom.EXTERNAL,
        user_id: Optional[str] = None,
    ) -> ConnectionSession:
        session = ConnectionSession(
            connection_id=connection_id,
            event_id=event_id,
            order_from=order_from,
            user_id=user_id,
        )
        self._sessions[connection_id] = session
        self._by_event.setdefault(event_id, {})[connection_id] = session
        Logger.base.debug(
            f'📇 [REGISTRY] Registered {connection_id} for event {event_id} '
            f'(connections: {len(self._by_event[event_id])})'
        )
        return session

    def unregister(self, *, connection_id: str) -> Optional[ConnectionSession]:
        session = self._sessions.pop(connection_id, None)
        if session is None:
            return None

        event_sessions = self._by_event.get(session.event_id)
        if event_sessions is not None:
            event_sessions.pop(connection_id, None)
            if not event_sessions:
                del self._by_event[session.event_id]
        Logger.base.debug(f'📇 [REGISTRY] Unregistered {connection_id}')
        return session

    def get_session(self, *, connection_id: str) -> Optional[ConnectionSession]:
        return self._sessions.get(connection_id)

    def list_sessions(self, *, event_id: str) -> List[ConnectionSession]:
        return list(self._by_event.get(event_id, {}).values())

    def list_other_sessions(
        self, *, event_id: str, excluding_connection_id: str
    ) -> List[ConnectionSession]:
        return [
            session
            for connection_id, session in self._by_event.get(event_id, {}).items()
            if connection_id != excluding_connection_id
        ]
