from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.orm_db_setting import Base


if TYPE_CHECKING:
    from src.service.shopping_cart.driven_adapter.model.room_model import RoomModel
    from src.service.shopping_cart.driven_adapter.model.venue_table_model import VenueTableModel


class SeatModel(Base):
    __tablename__ = 'seat'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    event_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    room_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    table_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    label: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    row: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    gross_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    # Set once an order / reservation is committed elsewhere
    committed_order_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    committed_reservation_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    room: Mapped[Optional['RoomModel']] = relationship(
        'RoomModel',
        primaryjoin='SeatModel.room_id == foreign(RoomModel.id)',
        viewonly=True,
        lazy='selectin',
    )
    table: Mapped[Optional['VenueTableModel']] = relationship(
        'VenueTableModel',
        primaryjoin='SeatModel.table_id == foreign(VenueTableModel.id)',
        viewonly=True,
        lazy='selectin',
    )
