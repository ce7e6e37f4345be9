from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class OrderDetailModel(Base):
    """One committed unit (ticket or seat) of an order; written by checkout, read here."""

    __tablename__ = 'order_detail'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    order_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    event_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # ticket / seat
    ticket_type_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    seat_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    state: Mapped[str] = mapped_column(String(20), nullable=False, default='sold')
