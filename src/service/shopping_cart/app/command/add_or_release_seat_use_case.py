"""
Add Or Release Seat Use Case - seat toggle with first-writer-wins exclusivity
"""

import time
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.shopping_cart_metrics import metrics
from src.platform.state.resource_lock import ResourceLock
from src.service.shopping_cart.app.command.publish_availability_use_case import (
    PublishAvailabilityUseCase,
)
from src.service.shopping_cart.app.dto import CartResult, Rejection
from src.service.shopping_cart.app.interface import IConnectionRegistry, IInventoryQueryRepo
from src.service.shopping_cart.domain.cart_allocation_domain import holder_of, seat_lock_key
from src.service.shopping_cart.domain.entity.cart_entity import LineItem
from src.service.shopping_cart.domain.enum import SeatState


class AddOrReleaseSeatUseCase:
    """
    Toggle a seat in a connection's cart.

    Decision order, all under the seat lock:
    1. unknown seat          -> not-found
    2. committed order       -> sold
    3. committed reservation -> reserved
    4. held by this cart     -> release
    5. held by another cart  -> blocked
    6. otherwise             -> add
    """

    def __init__(
        self,
        *,
        inventory_query_repo: IInventoryQueryRepo,
        connection_registry: IConnectionRegistry,
        resource_lock: ResourceLock,
        publisher: PublishAvailabilityUseCase,
    ) -> None:
        self.inventory_query_repo = inventory_query_repo
        self.connection_registry = connection_registry
        self.resource_lock = resource_lock
        self.publisher = publisher
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        inventory_query_repo: IInventoryQueryRepo = Depends(
            Provide[Container.inventory_query_repo]
        ),
        connection_registry: IConnectionRegistry = Depends(
            Provide[Container.connection_registry]
        ),
        resource_lock: ResourceLock = Depends(Provide[Container.resource_lock]),
        publisher: PublishAvailabilityUseCase = Depends(PublishAvailabilityUseCase.depends),
    ) -> Self:
        return cls(
            inventory_query_repo=inventory_query_repo,
            connection_registry=connection_registry,
            resource_lock=resource_lock,
            publisher=publisher,
        )

    def _reject(self, *, event_id: str, seat_id: str, state: SeatState) -> Rejection:
        metrics.record_operation(event_id=event_id, operation='add_or_release_seat', result='rejected')
        if state == SeatState.NOT_FOUND:
            Logger.base.warning(f'⚠️ [SEAT] Seat {seat_id} not found for event {event_id}')
        else:
            metrics.record_seat_conflict(event_id=event_id, state=state.value)
            Logger.base.info(f'🚫 [SEAT] Seat {seat_id} is {state}')
        return Rejection(reference_id=seat_id, state=state, reference_type='seat')

    @Logger.io
    async def add_or_release_seat(self, *, connection_id: str, seat_id: str) -> CartResult:
        session = self.connection_registry.get_session(connection_id=connection_id)
        if session is None:
            raise NotFoundError('Connection not found')
        event_id = session.event_id

        with self.tracer.start_as_current_span(
            'use_case.add_or_release_seat',
            attributes={'event.id': event_id, 'connection.id': connection_id, 'seat.id': seat_id},
        ):
            started = time.perf_counter()
            async with self.resource_lock.hold(seat_lock_key(event_id=event_id, seat_id=seat_id)):
                seat = await self.inventory_query_repo.get_seat(event_id=event_id, seat_id=seat_id)
                if seat is None:
                    return self._reject(event_id=event_id, seat_id=seat_id, state=SeatState.NOT_FOUND)

                committed_state = seat.committed_state
                if committed_state != SeatState.FREE:
                    return self._reject(event_id=event_id, seat_id=seat_id, state=committed_state)

                cart = session.get_or_create_cart()
                if cart.holds_seat(seat_id):
                    cart.remove_reference(seat_id)
                    new_state = SeatState.FREE
                else:
                    holder = holder_of(
                        self.connection_registry.list_other_sessions(
                            event_id=event_id, excluding_connection_id=connection_id
                        ),
                        seat_id,
                    )
                    if holder is not None:
                        return self._reject(
                            event_id=event_id, seat_id=seat_id, state=SeatState.BLOCKED
                        )
                    cart.add_items([LineItem.for_seat(seat)])
                    new_state = SeatState.BLOCKED

                result = cart.snapshot()

            metrics.cart_operation_duration.labels(operation='add_or_release_seat').observe(
                time.perf_counter() - started
            )
            metrics.record_operation(
                event_id=event_id, operation='add_or_release_seat', result='success'
            )
            Logger.base.info(
                f'💺 [SEAT] Connection {connection_id} '
                f'{"holds" if new_state == SeatState.BLOCKED else "released"} seat {seat_id}'
            )

            await self.publisher.publish_seat(event_id=event_id, seat_id=seat_id, state=new_state)
            return result
