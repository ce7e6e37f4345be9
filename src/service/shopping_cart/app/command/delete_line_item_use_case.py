from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.shopping_cart_metrics import metrics
from src.platform.state.resource_lock import ResourceLock
from src.service.shopping_cart.app.command.publish_availability_use_case import (
    PublishAvailabilityUseCase,
)
from src.service.shopping_cart.app.dto import CartResult, Rejection
from src.service.shopping_cart.app.interface import IConnectionRegistry
from src.service.shopping_cart.domain.cart_allocation_domain import line_item_lock_keys
from src.service.shopping_cart.domain.enum import LineItemType, SeatState


class DeleteLineItemUseCase:
    """Remove one line item by id and republish availability of its resource."""

    def __init__(
        self,
        *,
        connection_registry: IConnectionRegistry,
        resource_lock: ResourceLock,
        publisher: PublishAvailabilityUseCase,
    ) -> None:
        self.connection_registry = connection_registry
        self.resource_lock = resource_lock
        self.publisher = publisher

    @classmethod
    @inject
    def depends(
        cls,
        connection_registry: IConnectionRegistry = Depends(
            Provide[Container.connection_registry]
        ),
        resource_lock: ResourceLock = Depends(Provide[Container.resource_lock]),
        publisher: PublishAvailabilityUseCase = Depends(PublishAvailabilityUseCase.depends),
    ) -> Self:
        return cls(
            connection_registry=connection_registry,
            resource_lock=resource_lock,
            publisher=publisher,
        )

    @Logger.io
    async def delete_line_item(self, *, connection_id: str, line_item_id: str) -> CartResult:
        session = self.connection_registry.get_session(connection_id=connection_id)
        if session is None:
            raise NotFoundError('Connection not found')
        event_id = session.event_id
        cart = session.get_or_create_cart()

        item = cart.find_item(line_item_id)
        if item is None:
            Logger.base.warning(f'⚠️ [DELETE_ITEM] Line item {line_item_id} not in cart')
            metrics.record_operation(event_id=event_id, operation='delete_item', result='rejected')
            return Rejection(
                reference_id=line_item_id, state=SeatState.NOT_FOUND, reference_type='line_item'
            )

        async with self.resource_lock.hold_all(
            line_item_lock_keys(event_id=event_id, line_items=[item])
        ):
            removed = cart.remove_item(line_item_id)
            result = cart.snapshot()

        metrics.record_operation(event_id=event_id, operation='delete_item', result='success')
        if removed is not None:
            Logger.base.info(
                f'🗑️ [DELETE_ITEM] Removed {removed.type} {removed.reference_id} '
                f'from connection {connection_id}'
            )
            is_seat = removed.type == LineItemType.SEAT
            await self.publisher.publish_released(
                event_id=event_id,
                ticket_type_ids=[] if is_seat else [removed.reference_id],
                seat_ids=[removed.reference_id] if is_seat else [],
            )
        return result
