"""
Release Connection Use Case

Mandatory cleanup on disconnect: every hold of the connection is released
and availability is republished for each released resource.
"""

from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.shopping_cart_metrics import metrics
from src.platform.state.resource_lock import ResourceLock
from src.service.shopping_cart.app.command.publish_availability_use_case import (
    PublishAvailabilityUseCase,
)
from src.service.shopping_cart.app.interface import IConnectionRegistry
from src.service.shopping_cart.domain.cart_allocation_domain import line_item_lock_keys
from src.service.shopping_cart.domain.entity.cart_entity import LineItem
from src.service.shopping_cart.domain.enum import LineItemType


class ReleaseConnectionUseCase:
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
        self.tracer = trace.get_tracer(__name__)

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
    async def release_connection(self, *, connection_id: str) -> Optional[list[LineItem]]:
        """Drop the connection and its cart. Returns the released items, None if unknown."""
        session = self.connection_registry.get_session(connection_id=connection_id)
        if session is None:
            Logger.base.debug(f'🔌 [DISCONNECT] {connection_id} already released')
            return None
        event_id = session.event_id

        with self.tracer.start_as_current_span(
            'use_case.release_connection',
            attributes={'event.id': event_id, 'connection.id': connection_id},
        ):
            items = list(session.cart.line_items) if session.cart is not None else []
            async with self.resource_lock.hold_all(
                line_item_lock_keys(event_id=event_id, line_items=items)
            ):
                self.connection_registry.unregister(connection_id=connection_id)
                released = session.cart.clear() if session.cart is not None else []

            metrics.active_connections.labels(event_id=event_id).dec()
            Logger.base.info(
                f'🔌 [DISCONNECT] {connection_id} left event {event_id}, '
                f'released {len(released)} line items'
            )

            await self.publisher.publish_released(
                event_id=event_id,
                ticket_type_ids=[i.reference_id for i in released if i.type == LineItemType.TICKET],
                seat_ids=[i.reference_id for i in released if i.type == LineItemType.SEAT],
            )
            return released
