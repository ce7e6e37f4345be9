"""Shopping Cart Enums"""

from src.service.shopping_cart.domain.enum.line_item_type import LineItemState, LineItemType
from src.service.shopping_cart.domain.enum.order_from import OrderFrom
from src.service.shopping_cart.domain.enum.seat_state import SeatState
from src.service.shopping_cart.domain.enum.ticket_kind import TicketKind

__all__ = ['LineItemState', 'LineItemType', 'OrderFrom', 'SeatState', 'TicketKind']
