"""
Shopping cart fixtures: a seeded in-memory inventory, a live connection
registry and use cases wired the way the DI container wires them.
"""

import asyncio
from typing import Callable, Optional
from unittest.mock import AsyncMock

import pytest

from src.platform.state.resource_lock import ResourceLock
from src.service.shopping_cart.app.command.add_or_release_seat_use_case import (
    AddOrReleaseSeatUseCase,
)
from src.service.shopping_cart.app.command.delete_line_item_use_case import DeleteLineItemUseCase
from src.service.shopping_cart.app.command.empty_cart_use_case import EmptyCartUseCase
from src.service.shopping_cart.app.command.publish_availability_use_case import (
    PublishAvailabilityUseCase,
)
from src.service.shopping_cart.app.command.release_connection_use_case import (
    ReleaseConnectionUseCase,
)
from src.service.shopping_cart.app.command.set_discount_use_case import SetDiscountUseCase
from src.service.shopping_cart.app.command.set_ticket_use_case import SetTicketUseCase
from src.service.shopping_cart.domain.entity.connection_session_entity import ConnectionSession
from src.service.shopping_cart.domain.entity.inventory_entity import (
    EventEntity,
    SeatEntity,
    TicketTypeEntity,
)
from src.service.shopping_cart.domain.enum import OrderFrom, TicketKind
from src.service.shopping_cart.driven_adapter.repo.in_memory_inventory_query_repo_impl import (
    InMemoryInventoryQueryRepoImpl,
)
from src.service.shopping_cart.driven_adapter.state.in_memory_connection_registry_impl import (
    InMemoryConnectionRegistryImpl,
)
from test.service.shopping_cart.cart_test_helper import EVENT_ID, SMALL_EVENT_ID


class YieldingInventoryRepo(InMemoryInventoryQueryRepoImpl):
    """Yields to the event loop on every read, like a real database round trip."""

    async def get_ticket_type(self, *, event_id: str, ticket_type_id: str):
        await asyncio.sleep(0)
        return await super().get_ticket_type(event_id=event_id, ticket_type_id=ticket_type_id)

    async def get_seat(self, *, event_id: str, seat_id: str):
        await asyncio.sleep(0)
        return await super().get_seat(event_id=event_id, seat_id=seat_id)

    async def get_committed_sold_count(self, *, ticket_type_id: str) -> int:
        await asyncio.sleep(0)
        return await super().get_committed_sold_count(ticket_type_id=ticket_type_id)

    async def get_committed_visitor_count(self, *, event_id: str) -> int:
        await asyncio.sleep(0)
        return await super().get_committed_visitor_count(event_id=event_id)


def seed_inventory(repo: InMemoryInventoryQueryRepoImpl) -> None:
    repo.add_event(EventEntity(id=EVENT_ID, name='Summer Gala', maximum_visitors=100))
    repo.add_ticket_type(
        TicketTypeEntity(
            id='T1',
            event_id=EVENT_ID,
            kind=TicketKind.TICKET,
            name='standard',
            label='Standard Admission',
            contingent=10,
            online_maximum=4,
            gross_price='20.00',
            tax_percent='10',
            sort_order=1,
        )
    )
    repo.add_ticket_type(
        TicketTypeEntity(
            id='P1',
            event_id=EVENT_ID,
            kind=TicketKind.OTHER,
            name='parking',
            label='Parking',
            contingent=3,
            online_maximum=2,
            gross_price='5.00',
            tax_percent='19',
        )
    )
    repo.add_ticket_type(
        TicketTypeEntity(
            id='OLD',
            event_id=EVENT_ID,
            kind=TicketKind.TICKET,
            name='early-bird',
            label='Early Bird',
            contingent=10,
            online_maximum=4,
            gross_price='10.00',
            tax_percent='10',
            is_active=False,
        )
    )
    repo.add_seat(
        SeatEntity(
            id='S1',
            event_id=EVENT_ID,
            name='A-1',
            row='A',
            number='1',
            room_label='Main Hall',
            gross_price='30.00',
            tax_percent='10',
        )
    )
    repo.add_seat(
        SeatEntity(
            id='S2',
            event_id=EVENT_ID,
            name='TB1-2',
            number='2',
            table_label='Table',
            table_number='1',
            gross_price='45.00',
            tax_percent='10',
        )
    )
    repo.add_seat(
        SeatEntity(
            id='S_SOLD',
            event_id=EVENT_ID,
            number='9',
            gross_price='30.00',
            tax_percent='10',
            committed_order_id='order-1',
        )
    )
    repo.add_seat(
        SeatEntity(
            id='S_RESERVED',
            event_id=EVENT_ID,
            number='10',
            gross_price='30.00',
            tax_percent='10',
            committed_reservation_id='reservation-1',
        )
    )

    # Small venue: the visitor cap binds before the contingents do
    repo.add_event(EventEntity(id=SMALL_EVENT_ID, name='Club Night', maximum_visitors=5))
    for ticket_type_id in ('TA', 'TB'):
        repo.add_ticket_type(
            TicketTypeEntity(
                id=ticket_type_id,
                event_id=SMALL_EVENT_ID,
                kind=TicketKind.TICKET,
                name=ticket_type_id.lower(),
                label=f'Ticket {ticket_type_id}',
                contingent=10,
                online_maximum=10,
                gross_price='15.00',
                tax_percent='7',
            )
        )
    repo.add_ticket_type(
        TicketTypeEntity(
            id='TC',
            event_id=SMALL_EVENT_ID,
            kind=TicketKind.SEAT_BOUND,
            name='tc',
            label='Seat bound',
            contingent=10,
            online_maximum=10,
            gross_price='15.00',
            tax_percent='7',
        )
    )


@pytest.fixture
def inventory_repo() -> YieldingInventoryRepo:
    repo = YieldingInventoryRepo()
    seed_inventory(repo)
    return repo


@pytest.fixture
def connection_registry() -> InMemoryConnectionRegistryImpl:
    return InMemoryConnectionRegistryImpl()


@pytest.fixture
def resource_lock() -> ResourceLock:
    return ResourceLock()


@pytest.fixture
def broadcast_notifier() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def publisher(
    inventory_repo: YieldingInventoryRepo,
    connection_registry: InMemoryConnectionRegistryImpl,
    broadcast_notifier: AsyncMock,
) -> PublishAvailabilityUseCase:
    return PublishAvailabilityUseCase(
        inventory_query_repo=inventory_repo,
        connection_registry=connection_registry,
        broadcast_notifier=broadcast_notifier,
    )


@pytest.fixture
def connect(
    connection_registry: InMemoryConnectionRegistryImpl,
) -> Callable[..., ConnectionSession]:
    counter = {'n': 0}

    def _connect(
        event_id: str = EVENT_ID,
        order_from: OrderFrom = OrderFrom.EXTERNAL,
        user_id: Optional[str] = None,
    ) -> ConnectionSession:
        counter['n'] += 1
        return connection_registry.register(
            connection_id=f'conn-{counter["n"]}',
            event_id=event_id,
            order_from=order_from,
            user_id=user_id,
        )

    return _connect


@pytest.fixture
def set_ticket_use_case(
    inventory_repo: YieldingInventoryRepo,
    connection_registry: InMemoryConnectionRegistryImpl,
    resource_lock: ResourceLock,
    publisher: PublishAvailabilityUseCase,
) -> SetTicketUseCase:
    return SetTicketUseCase(
        inventory_query_repo=inventory_repo,
        connection_registry=connection_registry,
        resource_lock=resource_lock,
        publisher=publisher,
    )


@pytest.fixture
def add_or_release_seat_use_case(
    inventory_repo: YieldingInventoryRepo,
    connection_registry: InMemoryConnectionRegistryImpl,
    resource_lock: ResourceLock,
    publisher: PublishAvailabilityUseCase,
) -> AddOrReleaseSeatUseCase:
    return AddOrReleaseSeatUseCase(
        inventory_query_repo=inventory_repo,
        connection_registry=connection_registry,
        resource_lock=resource_lock,
        publisher=publisher,
    )


@pytest.fixture
def delete_line_item_use_case(
    connection_registry: InMemoryConnectionRegistryImpl,
    resource_lock: ResourceLock,
    publisher: PublishAvailabilityUseCase,
) -> DeleteLineItemUseCase:
    return DeleteLineItemUseCase(
        connection_registry=connection_registry, resource_lock=resource_lock, publisher=publisher
    )


@pytest.fixture
def empty_cart_use_case(
    connection_registry: InMemoryConnectionRegistryImpl,
    resource_lock: ResourceLock,
    publisher: PublishAvailabilityUseCase,
) -> EmptyCartUseCase:
    return EmptyCartUseCase(
        connection_registry=connection_registry, resource_lock=resource_lock, publisher=publisher
    )


@pytest.fixture
def release_connection_use_case(
    connection_registry: InMemoryConnectionRegistryImpl,
    resource_lock: ResourceLock,
    publisher: PublishAvailabilityUseCase,
) -> ReleaseConnectionUseCase:
    return ReleaseConnectionUseCase(
        connection_registry=connection_registry, resource_lock=resource_lock, publisher=publisher
    )


@pytest.fixture
def set_discount_use_case(
    connection_registry: InMemoryConnectionRegistryImpl,
) -> SetDiscountUseCase:
    return SetDiscountUseCase(connection_registry=connection_registry)
