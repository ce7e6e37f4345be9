"""
Publish Availability Use Case

Announces availability changes on the event channel after a cart mutation:

- update-ticket {ticket_type_id, ticket_kind, remaining_contingent}
- update-event  {event_id, remaining_visitor_capacity}
- update-seat   {seat_id, state}  (state: blocked | free)

Fire-and-forget: failures are logged and never reach the caller, whose cart
mutation has already happened.
"""

from typing import Iterable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.app.interface import (
    IBroadcastNotifier,
    IConnectionRegistry,
    IInventoryQueryRepo,
)
from src.service.shopping_cart.domain.cart_allocation_domain import (
    remaining_contingent,
    remaining_visitor_capacity,
)
from src.service.shopping_cart.domain.enum import SeatState


TOPIC_UPDATE_TICKET = 'update-ticket'
TOPIC_UPDATE_EVENT = 'update-event'
TOPIC_UPDATE_SEAT = 'update-seat'


class PublishAvailabilityUseCase:
    def __init__(
        self,
        *,
        inventory_query_repo: IInventoryQueryRepo,
        connection_registry: IConnectionRegistry,
        broadcast_notifier: IBroadcastNotifier,
    ) -> None:
        self.inventory_query_repo = inventory_query_repo
        self.connection_registry = connection_registry
        self.broadcast_notifier = broadcast_notifier

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
        broadcast_notifier: IBroadcastNotifier = Depends(Provide[Container.broadcast_notifier]),
    ) -> Self:
        return cls(
            inventory_query_repo=inventory_query_repo,
            connection_registry=connection_registry,
            broadcast_notifier=broadcast_notifier,
        )

    async def publish_ticket(self, *, event_id: str, ticket_type_id: str) -> None:
        try:
            ticket_type = await self.inventory_query_repo.get_ticket_type(
                event_id=event_id, ticket_type_id=ticket_type_id
            )
            if ticket_type is None:
                return
            committed_sold = await self.inventory_query_repo.get_committed_sold_count(
                ticket_type_id=ticket_type_id
            )
            remaining = remaining_contingent(
                ticket_type=ticket_type,
                committed_sold=committed_sold,
                sessions=self.connection_registry.list_sessions(event_id=event_id),
            )
            await self.broadcast_notifier.publish(
                event_id=event_id,
                topic=TOPIC_UPDATE_TICKET,
                payload={
                    'ticket_type_id': ticket_type_id,
                    'ticket_kind': ticket_type.kind,
                    'remaining_contingent': remaining,
                },
            )
        except Exception as e:
            Logger.base.error(
                f'❌ [PUBLISH] {TOPIC_UPDATE_TICKET} failed for {event_id}/{ticket_type_id}: {e}'
            )

    async def publish_event(self, *, event_id: str) -> None:
        try:
            event = await self.inventory_query_repo.get_event(event_id=event_id)
            if event is None:
                return
            committed_visitors = await self.inventory_query_repo.get_committed_visitor_count(
                event_id=event_id
            )
            remaining = remaining_visitor_capacity(
                event=event,
                committed_visitors=committed_visitors,
                sessions=self.connection_registry.list_sessions(event_id=event_id),
            )
            await self.broadcast_notifier.publish(
                event_id=event_id,
                topic=TOPIC_UPDATE_EVENT,
                payload={'event_id': event_id, 'remaining_visitor_capacity': remaining},
            )
        except Exception as e:
            Logger.base.error(f'❌ [PUBLISH] {TOPIC_UPDATE_EVENT} failed for {event_id}: {e}')

    async def publish_seat(self, *, event_id: str, seat_id: str, state: SeatState) -> None:
        try:
            await self.broadcast_notifier.publish(
                event_id=event_id,
                topic=TOPIC_UPDATE_SEAT,
                payload={'seat_id': seat_id, 'state': state.value},
            )
        except Exception as e:
            Logger.base.error(
                f'❌ [PUBLISH] {TOPIC_UPDATE_SEAT} failed for {event_id}/{seat_id}: {e}'
            )

    async def publish_released(
        self, *, event_id: str, ticket_type_ids: Iterable[str], seat_ids: Iterable[str]
    ) -> None:
        """Republish availability for everything a cart just let go of."""
        ticket_type_ids = list(dict.fromkeys(ticket_type_ids))
        for ticket_type_id in ticket_type_ids:
            await self.publish_ticket(event_id=event_id, ticket_type_id=ticket_type_id)
        if ticket_type_ids:
            await self.publish_event(event_id=event_id)
        for seat_id in dict.fromkeys(seat_ids):
            await self.publish_seat(event_id=event_id, seat_id=seat_id, state=SeatState.FREE)
