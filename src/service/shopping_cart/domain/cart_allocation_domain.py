"""
Cart Allocation Domain

Pure allocation rules over live carts - no inventory store, no locks, no I/O.
Callers pass the committed counts they read and the sessions they scanned.
"""

from collections.abc import Iterable
from typing import List, Optional, Tuple

from src.service.shopping_cart.domain.entity.cart_entity import LineItem
from src.service.shopping_cart.domain.entity.connection_session_entity import ConnectionSession
from src.service.shopping_cart.domain.entity.inventory_entity import EventEntity, TicketTypeEntity
from src.service.shopping_cart.domain.enum import LineItemType


CLAMP_ONLINE_MAX = 'online_max'
CLAMP_CONTINGENT = 'contingent'
CLAMP_VISITORS = 'visitors'


def holder_of(sessions: Iterable[ConnectionSession], seat_id: str) -> Optional[str]:
    """Connection id whose cart holds the seat, if any."""
    for session in sessions:
        if session.cart is not None and session.cart.holds_seat(seat_id):
            return session.connection_id
    return None


def held_units(sessions: Iterable[ConnectionSession], ticket_type_id: str) -> int:
    return sum(s.cart.held_quantity(ticket_type_id) for s in sessions if s.cart is not None)


def held_visitors(sessions: Iterable[ConnectionSession]) -> int:
    return sum(s.cart.held_visitors() for s in sessions if s.cart is not None)


def clamp_ticket_amount(
    *,
    requested: int,
    ticket_type: TicketTypeEntity,
    is_internal: bool,
    sold_held: int,
    event: Optional[EventEntity] = None,
    actual_visitors: int = 0,
) -> Tuple[int, List[str]]:
    """
    Clamp a requested ticket amount to what may be held.

    Applied in order:
    1. online maximum (external connections only)
    2. contingent minus committed and other held units (``sold_held``)
    3. event maximum visitors minus ``actual_visitors`` (visitor-counted kinds)

    Returns the granted amount (never below zero) and the clamp reasons hit.
    """
    granted = requested
    reasons: List[str] = []

    if not is_internal and granted > ticket_type.online_maximum:
        granted = ticket_type.online_maximum
        reasons.append(CLAMP_ONLINE_MAX)

    available = ticket_type.contingent - sold_held
    if granted > available:
        granted = available
        reasons.append(CLAMP_CONTINGENT)

    if ticket_type.counts_as_visitor and event is not None:
        visitor_room = event.maximum_visitors - actual_visitors
        if granted > visitor_room:
            granted = visitor_room
            reasons.append(CLAMP_VISITORS)

    return max(granted, 0), reasons


def remaining_contingent(
    *, ticket_type: TicketTypeEntity, committed_sold: int, sessions: Iterable[ConnectionSession]
) -> int:
    return max(ticket_type.contingent - committed_sold - held_units(sessions, ticket_type.id), 0)


def remaining_visitor_capacity(
    *, event: EventEntity, committed_visitors: int, sessions: Iterable[ConnectionSession]
) -> int:
    return max(event.maximum_visitors - committed_visitors - held_visitors(sessions), 0)


def ticket_lock_keys(*, event_id: str, ticket_type_id: str, counts_as_visitor: bool) -> List[tuple]:
    # Visitor-counted kinds share one event-wide cap across ticket types
    keys: List[tuple] = [(event_id, 'ticket', ticket_type_id)]
    if counts_as_visitor:
        keys.append((event_id, 'visitors'))
    return keys


def seat_lock_key(*, event_id: str, seat_id: str) -> tuple:
    return (event_id, 'seat', seat_id)


def line_item_lock_keys(*, event_id: str, line_items: Iterable[LineItem]) -> List[tuple]:
    keys: List[tuple] = []
    for item in line_items:
        if item.type == LineItemType.SEAT:
            keys.append(seat_lock_key(event_id=event_id, seat_id=item.reference_id))
        else:
            keys.extend(
                ticket_lock_keys(
                    event_id=event_id,
                    ticket_type_id=item.reference_id,
                    counts_as_visitor=item.counts_as_visitor,
                )
            )
    return list(dict.fromkeys(keys))
