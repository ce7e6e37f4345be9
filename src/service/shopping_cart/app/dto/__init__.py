"""Shopping Cart DTOs"""

from src.service.shopping_cart.app.dto.cart_result import CartResult, Rejection, is_rejection
from src.service.shopping_cart.app.dto.availability import EventAvailability, TicketAvailability

__all__ = [
    'CartResult',
    'EventAvailability',
    'Rejection',
    'TicketAvailability',
    'is_rejection',
]
