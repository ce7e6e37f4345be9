"""
Inventory read models: event, ticket type and seat as seen by the cart.

These are snapshots from the inventory store; the cart never mutates them.
"""

from decimal import Decimal
from typing import Optional

import attrs

from src.service.shopping_cart.domain.enum import SeatState, TicketKind
from src.service.shopping_cart.domain.value_object.money import to_decimal


@attrs.frozen
class EventEntity:
    id: str
    name: str
    maximum_visitors: int


@attrs.frozen
class TicketTypeEntity:
    id: str
    event_id: str
    kind: str
    name: str
    label: str
    contingent: int
    online_maximum: int
    gross_price: Decimal = attrs.field(converter=to_decimal)
    tax_percent: Decimal = attrs.field(converter=to_decimal)
    sort_order: int = 0
    scan_type: str = 'single'
    is_active: bool = True

    @property
    def counts_as_visitor(self) -> bool:
        return TicketKind.counts_as_visitor(self.kind)


@attrs.frozen
class SeatEntity:
    id: str
    event_id: str
    gross_price: Decimal = attrs.field(converter=to_decimal)
    tax_percent: Decimal = attrs.field(converter=to_decimal)
    name: str = ''
    label: Optional[str] = None
    row: Optional[str] = None
    number: Optional[str] = None
    room_id: Optional[str] = None
    room_name: Optional[str] = None
    room_label: Optional[str] = None
    table_id: Optional[str] = None
    table_name: Optional[str] = None
    table_label: Optional[str] = None
    table_number: Optional[str] = None
    committed_order_id: Optional[str] = None
    committed_reservation_id: Optional[str] = None

    @property
    def committed_state(self) -> SeatState:
        if self.committed_order_id is not None:
            return SeatState.SOLD
        if self.committed_reservation_id is not None:
            return SeatState.RESERVED
        return SeatState.FREE

    @property
    def display_text(self) -> str:
        parts = [self.room_label, self.table_label, self.label]
        if self.row and self.number:
            parts.append(f'{self.row}/{self.number}')
        elif self.table_number and self.number:
            parts.append(f'{self.table_number}/{self.number}')
        elif self.number:
            parts.append(self.number)
        return ' '.join(part for part in parts if part).strip()
