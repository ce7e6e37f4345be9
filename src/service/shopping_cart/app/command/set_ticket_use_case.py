"""
Set Ticket Use Case - fungible ticket holds with best-effort clamping
"""

import time
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.shopping_cart_metrics import metrics
from src.platform.state.resource_lock import ResourceLock
from src.service.shopping_cart.app.command.publish_availability_use_case import (
    PublishAvailabilityUseCase,
)
from src.service.shopping_cart.app.dto import CartResult, Rejection
from src.service.shopping_cart.app.interface import IConnectionRegistry, IInventoryQueryRepo
from src.service.shopping_cart.domain.cart_allocation_domain import (
    clamp_ticket_amount,
    held_units,
    held_visitors,
    ticket_lock_keys,
)
from src.service.shopping_cart.domain.entity.cart_entity import LineItem
from src.service.shopping_cart.domain.enum import SeatState


class SetTicketUseCase:
    """
    Set the number of held units of one ticket type in a connection's cart.

    The amount is an absolute target, not a delta. Over-requests are clamped
    silently (online maximum, contingent, visitor cap); the caller compares the
    requested amount with the cart to tell.

    Flow (under the ticket type lock, plus the event visitor lock for
    visitor-counted kinds):
    1. Read committed sold / visitor counts
    2. Scan the other carts of the event for held units
    3. Clamp the amount
    4. Replace the cart's items of the ticket type, recompute totals
    5. Publish update-ticket and update-event
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

    @Logger.io
    async def set_ticket(
        self, *, connection_id: str, ticket_type_id: str, amount: int
    ) -> CartResult:
        if amount < 0:
            raise DomainError('Amount must not be negative')

        session = self.connection_registry.get_session(connection_id=connection_id)
        if session is None:
            raise NotFoundError('Connection not found')
        event_id = session.event_id

        with self.tracer.start_as_current_span(
            'use_case.set_ticket',
            attributes={
                'event.id': event_id,
                'connection.id': connection_id,
                'ticket_type.id': ticket_type_id,
                'ticket.amount': amount,
            },
        ):
            started = time.perf_counter()
            ticket_type = await self.inventory_query_repo.get_ticket_type(
                event_id=event_id, ticket_type_id=ticket_type_id
            )
            if ticket_type is None:
                Logger.base.warning(
                    f'⚠️ [SET_TICKET] Ticket type {ticket_type_id} not found for event {event_id}'
                )
                metrics.record_operation(event_id=event_id, operation='set_ticket', result='rejected')
                return Rejection(
                    reference_id=ticket_type_id,
                    state=SeatState.NOT_FOUND,
                    reference_type='ticket',
                )

            keys = ticket_lock_keys(
                event_id=event_id,
                ticket_type_id=ticket_type_id,
                counts_as_visitor=ticket_type.counts_as_visitor,
            )
            async with self.resource_lock.hold_all(keys):
                cart = session.get_or_create_cart()
                granted = 0

                if amount > 0:
                    # Every read happens before the cart is touched
                    committed_sold = await self.inventory_query_repo.get_committed_sold_count(
                        ticket_type_id=ticket_type_id
                    )
                    event = None
                    committed_visitors = 0
                    if ticket_type.counts_as_visitor:
                        event = await self.inventory_query_repo.get_event(event_id=event_id)
                        if event is None:
                            Logger.base.warning(f'⚠️ [SET_TICKET] Event {event_id} not found')
                            metrics.record_operation(
                                event_id=event_id, operation='set_ticket', result='rejected'
                            )
                            return Rejection(
                                reference_id=event_id,
                                state=SeatState.NOT_FOUND,
                                reference_type='event',
                            )
                        committed_visitors = (
                            await self.inventory_query_repo.get_committed_visitor_count(
                                event_id=event_id
                            )
                        )

                    others = self.connection_registry.list_other_sessions(
                        event_id=event_id, excluding_connection_id=connection_id
                    )
                    sold_held = committed_sold + held_units(others, ticket_type_id)
                    # Own holds of other visitor-counted types share the event cap
                    own_visitors = cart.held_visitors() - cart.held_quantity(ticket_type_id)
                    actual_visitors = committed_visitors + held_visitors(others) + own_visitors

                    granted, reasons = clamp_ticket_amount(
                        requested=amount,
                        ticket_type=ticket_type,
                        is_internal=cart.is_internal,
                        sold_held=sold_held,
                        event=event,
                        actual_visitors=actual_visitors,
                    )
                    for reason in reasons:
                        metrics.record_clamp(event_id=event_id, reason=reason)
                    if granted < amount:
                        Logger.base.info(
                            f'✂️ [SET_TICKET] Clamped {ticket_type_id} from {amount} to {granted} '
                            f'({", ".join(reasons)})'
                        )

                cart.remove_reference(ticket_type_id)
                if granted:
                    cart.add_items([LineItem.for_ticket(ticket_type) for _ in range(granted)])
                result = cart.snapshot()

            metrics.cart_operation_duration.labels(operation='set_ticket').observe(
                time.perf_counter() - started
            )
            metrics.record_operation(event_id=event_id, operation='set_ticket', result='success')
            Logger.base.info(
                f'🎫 [SET_TICKET] Connection {connection_id} holds {granted} x {ticket_type_id} '
                f'(total {result.totals.gross_price})'
            )

            await self.publisher.publish_ticket(event_id=event_id, ticket_type_id=ticket_type_id)
            await self.publisher.publish_event(event_id=event_id)
            return result
