from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.service.shopping_cart.app.dto import EventAvailability
from src.service.shopping_cart.domain.entity.cart_entity import Cart, LineItem


# ---- inbound websocket messages ----


class CartMessage(BaseModel):
    action: str
    data: Any = None


class SetTicketData(BaseModel):
    # Numeric ids are accepted like seat and line item ids
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    ticket_type_id: str = Field(alias='ID', min_length=1)
    amount: int = Field(alias='Amount', ge=0)


class SetDiscountData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    line_item_id: str = Field(alias='ID', min_length=1)
    discount: Decimal = Field(alias='Discount')


# ---- outbound ----


class LineItemResponse(BaseModel):
    id: str
    type: str
    reference_id: str
    name: str
    text: str
    kind: Optional[str] = None
    scan_type: str
    state: str
    sort_order: int
    gross_regular: Decimal
    discount: Decimal
    tax_percent: Decimal
    gross_price: Decimal
    net_price: Decimal
    tax_price: Decimal

    @classmethod
    def from_entity(cls, item: LineItem) -> 'LineItemResponse':
        return cls(
            id=item.id,
            type=item.type.value,
            reference_id=item.reference_id,
            name=item.name,
            text=item.text,
            kind=item.kind,
            scan_type=item.scan_type,
            state=item.state.value,
            sort_order=item.sort_order,
            gross_regular=item.gross_regular,
            discount=item.discount,
            tax_percent=item.tax_percent,
            gross_price=item.gross_price,
            net_price=item.net_price,
            tax_price=item.tax_price,
        )


class CartResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'order_from': 'external',
                'user_id': None,
                'line_items': [],
                'gross_price': '40.00',
                'net_price': '36.36',
                'tax_price': '3.64',
            }
        }
    )

    order_from: str
    user_id: Optional[str] = None
    line_items: List[LineItemResponse] = []
    gross_price: Decimal
    net_price: Decimal
    tax_price: Decimal

    @classmethod
    def from_entity(cls, cart: Cart) -> 'CartResponse':
        return cls(
            order_from=cart.order_from.value,
            user_id=cart.user_id,
            line_items=[LineItemResponse.from_entity(item) for item in cart.line_items],
            gross_price=cart.totals.gross_price,
            net_price=cart.totals.net_price,
            tax_price=cart.totals.tax_price,
        )


class TicketAvailabilityResponse(BaseModel):
    ticket_type_id: str
    ticket_kind: str
    remaining_contingent: int


class EventAvailabilityResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'event_id': 'event-1',
                'remaining_visitor_capacity': 96,
                'tickets': [
                    {'ticket_type_id': 'T1', 'ticket_kind': 'ticket', 'remaining_contingent': 6}
                ],
            }
        }
    )

    event_id: str
    remaining_visitor_capacity: int
    tickets: List[TicketAvailabilityResponse] = []

    @classmethod
    def from_dto(cls, availability: EventAvailability) -> 'EventAvailabilityResponse':
        return cls(
            event_id=availability.event_id,
            remaining_visitor_capacity=availability.remaining_visitor_capacity,
            tickets=[
                TicketAvailabilityResponse(
                    ticket_type_id=t.ticket_type_id,
                    ticket_kind=t.ticket_kind,
                    remaining_contingent=t.remaining_contingent,
                )
                for t in availability.tickets
            ],
        )
