"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.shopping_cart.app.command import (
    add_or_release_seat_use_case,
    delete_line_item_use_case,
    empty_cart_use_case,
    open_connection_use_case,
    publish_availability_use_case,
    release_connection_use_case,
    set_discount_use_case,
    set_ticket_use_case,
)
from src.service.shopping_cart.app.query import (
    get_cart_use_case,
    get_event_availability_use_case,
)
from src.service.shopping_cart.driving_adapter.websocket import cart_websocket_controller


WIRE_MODULES: list[ModuleType] = [
    publish_availability_use_case,
    set_ticket_use_case,
    add_or_release_seat_use_case,
    delete_line_item_use_case,
    empty_cart_use_case,
    set_discount_use_case,
    open_connection_use_case,
    release_connection_use_case,
    get_cart_use_case,
    get_event_availability_use_case,
    cart_websocket_controller,
]
