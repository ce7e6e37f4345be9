from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.app.dto import EventAvailability, TicketAvailability
from src.service.shopping_cart.app.interface import IConnectionRegistry, IInventoryQueryRepo
from src.service.shopping_cart.domain.cart_allocation_domain import (
    remaining_contingent,
    remaining_visitor_capacity,
)


class GetEventAvailabilityUseCase:
    def __init__(
        self,
        *,
        inventory_query_repo: IInventoryQueryRepo,
        connection_registry: IConnectionRegistry,
    ) -> None:
        self.inventory_query_repo = inventory_query_repo
        self.connection_registry = connection_registry

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
    ) -> Self:
        return cls(
            inventory_query_repo=inventory_query_repo, connection_registry=connection_registry
        )

    @Logger.io
    async def get_availability(self, *, event_id: str) -> EventAvailability:
        """Remaining contingent per ticket type and visitor capacity, live holds included."""
        event = await self.inventory_query_repo.get_event(event_id=event_id)
        if event is None:
            raise NotFoundError(f'Event {event_id} not found')

        sessions = self.connection_registry.list_sessions(event_id=event_id)
        tickets = []
        for ticket_type in await self.inventory_query_repo.list_ticket_types(event_id=event_id):
            committed_sold = await self.inventory_query_repo.get_committed_sold_count(
                ticket_type_id=ticket_type.id
            )
            tickets.append(
                TicketAvailability(
                    ticket_type_id=ticket_type.id,
                    ticket_kind=ticket_type.kind,
                    remaining_contingent=remaining_contingent(
                        ticket_type=ticket_type, committed_sold=committed_sold, sessions=sessions
                    ),
                )
            )

        committed_visitors = await self.inventory_query_repo.get_committed_visitor_count(
            event_id=event_id
        )
        Logger.base.info(f'📊 [AVAILABILITY] Event {event_id}: {len(tickets)} ticket types')
        return EventAvailability(
            event_id=event_id,
            remaining_visitor_capacity=remaining_visitor_capacity(
                event=event, committed_visitors=committed_visitors, sessions=sessions
            ),
            tickets=tickets,
        )
