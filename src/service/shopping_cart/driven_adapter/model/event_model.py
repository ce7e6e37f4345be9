from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class EventModel(Base):
    __tablename__ = 'event'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    maximum_visitors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
