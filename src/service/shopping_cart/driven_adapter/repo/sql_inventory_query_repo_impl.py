"""
Inventory Query Repository Implementation - CQRS Read Side (SQLAlchemy)
"""

from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional

import attrs
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import InventoryUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.app.interface.i_inventory_query_repo import IInventoryQueryRepo
from src.service.shopping_cart.domain.entity.inventory_entity import (
    EventEntity,
    SeatEntity,
    TicketTypeEntity,
)
from src.service.shopping_cart.domain.enum import TicketKind
from src.service.shopping_cart.driven_adapter.model import (
    EventModel,
    OrderDetailModel,
    SeatModel,
    TicketTypeModel,
)


# Order detail states that consume inventory
COMMITTED_STATES = ('sold', 'reserved')


class SqlInventoryQueryRepoImpl(IInventoryQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ) -> None:
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is None and self.session_factory is None:
            raise RuntimeError('No session or session_factory available')
        try:
            if self.session is not None:
                yield self.session
            else:
                async with self.session_factory() as session:  # type: ignore
                    yield session
        except (SQLAlchemyError, OSError) as e:
            Logger.base.error(f'❌ [INVENTORY] Store unavailable: {e}')
            raise InventoryUnavailableError('Inventory store unavailable') from e

    @staticmethod
    def _model_to_ticket_type(model: TicketTypeModel) -> TicketTypeEntity:
        return TicketTypeEntity(
            id=model.id,
            event_id=model.event_id,
            kind=model.kind,
            name=model.name,
            label=model.label,
            contingent=model.contingent,
            online_maximum=model.online_maximum,
            gross_price=model.gross_price,
            tax_percent=model.tax_percent,
            sort_order=model.sort_order,
            scan_type=model.scan_type,
            is_active=model.is_active,
        )

    @staticmethod
    def _model_to_seat(model: SeatModel) -> SeatEntity:
        room = model.room
        table = model.table
        return SeatEntity(
            id=model.id,
            event_id=model.event_id,
            gross_price=model.gross_price,
            tax_percent=model.tax_percent,
            name=model.name,
            label=model.label,
            row=model.row,
            number=model.number,
            room_id=model.room_id,
            room_name=room.name if room else None,
            room_label=room.label if room else None,
            table_id=model.table_id,
            table_name=table.name if table else None,
            table_label=table.label if table else None,
            table_number=table.number if table else None,
            committed_order_id=model.committed_order_id,
            committed_reservation_id=model.committed_reservation_id,
        )

    @Logger.io
    async def get_event(self, *, event_id: str) -> Optional[EventEntity]:
        async with self._get_session() as session:
            model = await session.get(EventModel, event_id)
        if model is None:
            return None
        return EventEntity(id=model.id, name=model.name, maximum_visitors=model.maximum_visitors)

    @Logger.io
    async def get_ticket_type(
        self, *, event_id: str, ticket_type_id: str
    ) -> Optional[TicketTypeEntity]:
        async with self._get_session() as session:
            result = await session.execute(
                select(TicketTypeModel).where(
                    TicketTypeModel.id == ticket_type_id,
                    TicketTypeModel.event_id == event_id,
                    TicketTypeModel.is_active.is_(True),
                )
            )
            model = result.scalar_one_or_none()
        return self._model_to_ticket_type(model) if model else None

    @Logger.io
    async def list_ticket_types(self, *, event_id: str) -> List[TicketTypeEntity]:
        async with self._get_session() as session:
            result = await session.execute(
                select(TicketTypeModel)
                .where(TicketTypeModel.event_id == event_id, TicketTypeModel.is_active.is_(True))
                .order_by(TicketTypeModel.sort_order, TicketTypeModel.id)
            )
            models = result.scalars().all()
        return [self._model_to_ticket_type(m) for m in models]

    @Logger.io
    async def get_seat(self, *, event_id: str, seat_id: str) -> Optional[SeatEntity]:
        async with self._get_session() as session:
            result = await session.execute(
                select(SeatModel).where(SeatModel.id == seat_id, SeatModel.event_id == event_id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            # Relationships load eagerly (selectin) inside the session
            seat = self._model_to_seat(model)
            committed = await session.execute(
                select(OrderDetailModel.state, OrderDetailModel.order_id).where(
                    OrderDetailModel.seat_id == seat_id,
                    OrderDetailModel.event_id == event_id,
                    OrderDetailModel.state.in_(COMMITTED_STATES),
                )
            )
            order_ids = dict(committed.tuples().all())
        # Sold or reserved order details for the seat commit it like the seat columns do
        return attrs.evolve(
            seat,
            committed_order_id=seat.committed_order_id or order_ids.get('sold'),
            committed_reservation_id=seat.committed_reservation_id or order_ids.get('reserved'),
        )

    @Logger.io
    async def get_committed_sold_count(self, *, ticket_type_id: str) -> int:
        async with self._get_session() as session:
            result = await session.execute(
                select(func.count(OrderDetailModel.id)).where(
                    OrderDetailModel.ticket_type_id == ticket_type_id,
                    OrderDetailModel.state.in_(COMMITTED_STATES),
                )
            )
            return int(result.scalar_one())

    @Logger.io
    async def get_committed_visitor_count(self, *, event_id: str) -> int:
        async with self._get_session() as session:
            result = await session.execute(
                select(func.count(OrderDetailModel.id))
                .join(TicketTypeModel, TicketTypeModel.id == OrderDetailModel.ticket_type_id)
                .where(
                    OrderDetailModel.event_id == event_id,
                    OrderDetailModel.state.in_(COMMITTED_STATES),
                    TicketTypeModel.kind == TicketKind.TICKET.value,
                )
            )
            return int(result.scalar_one())
