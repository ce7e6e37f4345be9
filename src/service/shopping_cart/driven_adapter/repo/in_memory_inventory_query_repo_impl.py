"""
In-memory Inventory Query Repository

Backs local runs and tests; populated from a seed file or directly.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional

from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.app.interface.i_inventory_query_repo import IInventoryQueryRepo
from src.service.shopping_cart.domain.entity.inventory_entity import (
    EventEntity,
    SeatEntity,
    TicketTypeEntity,
)
from src.service.shopping_cart.driven_adapter.repo.inventory_seed import resolve_seat_locations


class InMemoryInventoryQueryRepoImpl(IInventoryQueryRepo):
    def __init__(self) -> None:
        self._events: Dict[str, EventEntity] = {}
        self._ticket_types: Dict[str, TicketTypeEntity] = {}
        self._seats: Dict[str, SeatEntity] = {}
        self._sold_counts: Dict[str, int] = defaultdict(int)

    # ---- population ----

    def add_event(self, event: EventEntity) -> None:
        self._events[event.id] = event

    def add_ticket_type(self, ticket_type: TicketTypeEntity) -> None:
        self._ticket_types[ticket_type.id] = ticket_type

    def add_seat(self, seat: SeatEntity) -> None:
        self._seats[seat.id] = seat

    def set_sold_count(self, *, ticket_type_id: str, sold: int) -> None:
        self._sold_counts[ticket_type_id] = sold

    def load_seed(self, data: Dict[str, Any]) -> None:
        """
        Load ``{"events": [...]}`` where each event carries its ``ticket_types``
        (optionally with ``sold``) and ``seats``.
        """
        for raw_event in resolve_seat_locations(data)['events']:
            event_id = str(raw_event['id'])
            self.add_event(
                EventEntity(
                    id=event_id,
                    name=raw_event.get('name', ''),
                    maximum_visitors=int(raw_event['maximum_visitors']),
                )
            )
            for raw in raw_event.get('ticket_types', []):
                fields = dict(raw)
                sold = int(fields.pop('sold', 0))
                ticket_type = TicketTypeEntity(event_id=event_id, **fields)
                self.add_ticket_type(ticket_type)
                self.set_sold_count(ticket_type_id=ticket_type.id, sold=sold)
            for raw in raw_event.get('seats', []):
                self.add_seat(SeatEntity(event_id=event_id, **raw))

        Logger.base.info(
            f'🌱 [SEED] Loaded {len(self._events)} events, '
            f'{len(self._ticket_types)} ticket types, {len(self._seats)} seats'
        )

    # ---- queries ----

    async def get_event(self, *, event_id: str) -> Optional[EventEntity]:
        return self._events.get(event_id)

    async def get_ticket_type(
        self, *, event_id: str, ticket_type_id: str
    ) -> Optional[TicketTypeEntity]:
        ticket_type = self._ticket_types.get(ticket_type_id)
        if ticket_type is None or ticket_type.event_id != event_id or not ticket_type.is_active:
            return None
        return ticket_type

    async def list_ticket_types(self, *, event_id: str) -> List[TicketTypeEntity]:
        return sorted(
            (t for t in self._ticket_types.values() if t.event_id == event_id and t.is_active),
            key=lambda t: (t.sort_order, t.id),
        )

    async def get_seat(self, *, event_id: str, seat_id: str) -> Optional[SeatEntity]:
        seat = self._seats.get(seat_id)
        if seat is None or seat.event_id != event_id:
            return None
        return seat

    async def get_committed_sold_count(self, *, ticket_type_id: str) -> int:
        return self._sold_counts.get(ticket_type_id, 0)

    async def get_committed_visitor_count(self, *, event_id: str) -> int:
        return sum(
            self._sold_counts.get(t.id, 0)
            for t in self._ticket_types.values()
            if t.event_id == event_id and t.counts_as_visitor
        )
