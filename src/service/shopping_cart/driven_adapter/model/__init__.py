"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.shopping_cart.driven_adapter.model.event_model import EventModel
from src.service.shopping_cart.driven_adapter.model.order_detail_model import OrderDetailModel
from src.service.shopping_cart.driven_adapter.model.room_model import RoomModel
from src.service.shopping_cart.driven_adapter.model.seat_model import SeatModel
from src.service.shopping_cart.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.shopping_cart.driven_adapter.model.venue_table_model import VenueTableModel

__all__ = [
    'EventModel',
    'OrderDetailModel',
    'RoomModel',
    'SeatModel',
    'TicketTypeModel',
    'VenueTableModel',
]
