"""
Connection Registry Interface

Owns the ``connection_id -> ConnectionSession`` mapping (and through it each
connection's cart). Business logic reaches other connections' carts only
through this interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.shopping_cart.domain.entity.connection_session_entity import ConnectionSession
from src.service.shopping_cart.domain.enum import OrderFrom


class IConnectionRegistry(ABC):
    @abstractmethod
    def register(
        self,
        *,
        connection_id: str,
        event_id: str,
        order_from: OrderFrom = OrderFrom.EXTERNAL,
        user_id: Optional[str] = None,
    ) -> ConnectionSession:
        pass

    @abstractmethod
    def unregister(self, *, connection_id: str) -> Optional[ConnectionSession]:
        """Remove the session and return it (with its cart), or None if unknown."""
        pass

    @abstractmethod
    def get_session(self, *, connection_id: str) -> Optional[ConnectionSession]:
        pass

    @abstractmethod
    def list_sessions(self, *, event_id: str) -> List[ConnectionSession]:
        pass

    @abstractmethod
    def list_other_sessions(
        self, *, event_id: str, excluding_connection_id: str
    ) -> List[ConnectionSession]:
        pass
