"""
Inventory Query Repository Interface

CQRS Query Side - committed inventory state (ticket types, seats, sold counts).
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.shopping_cart.domain.entity.inventory_entity import (
    EventEntity,
    SeatEntity,
    TicketTypeEntity,
)


class IInventoryQueryRepo(ABC):
    @abstractmethod
    async def get_event(self, *, event_id: str) -> Optional[EventEntity]:
        pass

    @abstractmethod
    async def get_ticket_type(
        self, *, event_id: str, ticket_type_id: str
    ) -> Optional[TicketTypeEntity]:
        """Return an active ticket type of the event, or None."""
        pass

    @abstractmethod
    async def list_ticket_types(self, *, event_id: str) -> List[TicketTypeEntity]:
        pass

    @abstractmethod
    async def get_seat(self, *, event_id: str, seat_id: str) -> Optional[SeatEntity]:
        """Return the seat with its committed order/reservation links, or None."""
        pass

    @abstractmethod
    async def get_committed_sold_count(self, *, ticket_type_id: str) -> int:
        """Units of the ticket type on committed orders."""
        pass

    @abstractmethod
    async def get_committed_visitor_count(self, *, event_id: str) -> int:
        """Units of visitor-counted ticket types on committed orders of the event."""
        pass
