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
from src.service.shopping_cart.app.interface import IConnectionRegistry
from src.service.shopping_cart.domain.cart_allocation_domain import line_item_lock_keys
from src.service.shopping_cart.domain.entity.cart_entity import Cart
from src.service.shopping_cart.domain.enum import LineItemType


class EmptyCartUseCase:
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
    async def empty_cart(self, *, connection_id: str) -> Cart:
        session = self.connection_registry.get_session(connection_id=connection_id)
        if session is None:
            raise NotFoundError('Connection not found')
        event_id = session.event_id
        cart = session.get_or_create_cart()

        async with self.resource_lock.hold_all(
            line_item_lock_keys(event_id=event_id, line_items=list(cart.line_items))
        ):
            removed = cart.clear()
            result = cart.snapshot()

        metrics.record_operation(event_id=event_id, operation='empty_cart', result='success')
        Logger.base.info(
            f'🧹 [EMPTY_CART] Connection {connection_id} released {len(removed)} line items'
        )
        await self.publisher.publish_released(
            event_id=event_id,
            ticket_type_ids=[i.reference_id for i in removed if i.type == LineItemType.TICKET],
            seat_ids=[i.reference_id for i in removed if i.type == LineItemType.SEAT],
        )
        return result
