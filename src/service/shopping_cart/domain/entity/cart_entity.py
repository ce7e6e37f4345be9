from decimal import Decimal
from typing import List, Optional

import attrs
from uuid_utils import uuid7

from src.service.shopping_cart.domain.entity.inventory_entity import SeatEntity, TicketTypeEntity
from src.service.shopping_cart.domain.enum import (
    LineItemState,
    LineItemType,
    OrderFrom,
    TicketKind,
)
from src.service.shopping_cart.domain.price_calculator import CartTotals, calculate_line, recompute
from src.service.shopping_cart.domain.value_object.money import ZERO


def _new_line_item_id() -> str:
    return str(uuid7())


@attrs.define
class LineItem:
    type: LineItemType
    reference_id: str
    name: str
    text: str
    gross_regular: Decimal
    tax_percent: Decimal
    scan_type: str = 'single'
    sort_order: int = 0
    kind: Optional[str] = None  # ticket kind, None for seats
    discount: Decimal = ZERO
    state: LineItemState = LineItemState.HELD
    gross_price: Decimal = ZERO
    net_price: Decimal = ZERO
    tax_price: Decimal = ZERO
    id: str = attrs.field(factory=_new_line_item_id)

    @classmethod
    def for_ticket(cls, ticket_type: TicketTypeEntity) -> 'LineItem':
        # Price fields are captured at hold time
        return cls(
            type=LineItemType.TICKET,
            reference_id=ticket_type.id,
            name=ticket_type.name,
            text=ticket_type.label,
            kind=ticket_type.kind,
            scan_type=ticket_type.scan_type,
            sort_order=ticket_type.sort_order,
            gross_regular=ticket_type.gross_price,
            tax_percent=ticket_type.tax_percent,
        )

    @classmethod
    def for_seat(cls, seat: SeatEntity) -> 'LineItem':
        return cls(
            type=LineItemType.SEAT,
            reference_id=seat.id,
            name=seat.name,
            text=seat.display_text,
            scan_type='single',
            sort_order=0,
            gross_regular=seat.gross_price,
            tax_percent=seat.tax_percent,
        )

    @property
    def counts_as_visitor(self) -> bool:
        return self.type == LineItemType.TICKET and TicketKind.counts_as_visitor(self.kind or '')

    def apply_prices(self) -> None:
        line = calculate_line(
            unit_gross=self.gross_regular, discount=self.discount, tax_percent=self.tax_percent
        )
        self.gross_price = line.gross_price
        self.net_price = line.net_price
        self.tax_price = line.tax_price


@attrs.define
class Cart:
    connection_id: str
    order_from: OrderFrom
    user_id: Optional[str] = None
    line_items: List[LineItem] = attrs.field(factory=list)
    totals: CartTotals = attrs.field(factory=CartTotals)

    @property
    def is_internal(self) -> bool:
        return self.order_from == OrderFrom.INTERNAL

    def held_quantity(self, ticket_type_id: str) -> int:
        return sum(
            1
            for item in self.line_items
            if item.type == LineItemType.TICKET and item.reference_id == ticket_type_id
        )

    def held_visitors(self) -> int:
        return sum(1 for item in self.line_items if item.counts_as_visitor)

    def holds_seat(self, seat_id: str) -> bool:
        return any(
            item.type == LineItemType.SEAT and item.reference_id == seat_id
            for item in self.line_items
        )

    def find_item(self, line_item_id: str) -> Optional[LineItem]:
        return next((item for item in self.line_items if item.id == line_item_id), None)

    def add_items(self, items: List[LineItem]) -> None:
        self.line_items.extend(items)
        self.recalculate()

    def remove_reference(self, reference_id: str) -> List[LineItem]:
        removed = [item for item in self.line_items if item.reference_id == reference_id]
        if removed:
            self.line_items = [i for i in self.line_items if i.reference_id != reference_id]
        self.recalculate()
        return removed

    def remove_item(self, line_item_id: str) -> Optional[LineItem]:
        item = self.find_item(line_item_id)
        if item is not None:
            self.line_items.remove(item)
        self.recalculate()
        return item

    def clear(self) -> List[LineItem]:
        removed, self.line_items = self.line_items, []
        self.recalculate()
        return removed

    def recalculate(self) -> None:
        for item in self.line_items:
            item.apply_prices()
        self.totals = recompute(self.line_items)

    def snapshot(self) -> 'Cart':
        return attrs.evolve(self, line_items=[attrs.evolve(item) for item in self.line_items])
