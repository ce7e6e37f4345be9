from decimal import Decimal

from sqlalchemy import Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class TicketTypeModel(Base):
    __tablename__ = 'ticket_type'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    event_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False, default='ticket')
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    contingent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    online_maximum: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gross_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scan_type: Mapped[str] = mapped_column(String(20), nullable=False, default='single')
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
