"""
Unit tests for the cart maintenance use cases: delete line item, empty cart,
discount, open / release connection and cart / availability queries.
"""

from decimal import Decimal
from typing import Callable
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.service.shopping_cart.app.command.add_or_release_seat_use_case import (
    AddOrReleaseSeatUseCase,
)
from src.service.shopping_cart.app.command.delete_line_item_use_case import DeleteLineItemUseCase
from src.service.shopping_cart.app.command.empty_cart_use_case import EmptyCartUseCase
from src.service.shopping_cart.app.command.open_connection_use_case import OpenConnectionUseCase
from src.service.shopping_cart.app.command.release_connection_use_case import (
    ReleaseConnectionUseCase,
)
from src.service.shopping_cart.app.command.set_discount_use_case import SetDiscountUseCase
from src.service.shopping_cart.app.command.set_ticket_use_case import SetTicketUseCase
from src.service.shopping_cart.app.dto import is_rejection
from src.service.shopping_cart.app.query.get_cart_use_case import GetCartUseCase
from src.service.shopping_cart.app.query.get_event_availability_use_case import (
    GetEventAvailabilityUseCase,
)
from src.service.shopping_cart.domain.entity.cart_entity import Cart
from src.service.shopping_cart.domain.entity.connection_session_entity import ConnectionSession
from src.service.shopping_cart.domain.enum import LineItemType, OrderFrom, SeatState
from test.service.shopping_cart.cart_test_helper import EVENT_ID, published


Connect = Callable[..., ConnectionSession]


@pytest_asyncio.fixture
async def filled_session(
    connect: Connect,
    set_ticket_use_case: SetTicketUseCase,
    add_or_release_seat_use_case: AddOrReleaseSeatUseCase,
    broadcast_notifier: AsyncMock,
) -> ConnectionSession:
    """An internal connection holding 2 x T1 and seat S1; broadcasts so far are discarded."""
    session = connect(order_from=OrderFrom.INTERNAL, user_id='clerk-1')
    await set_ticket_use_case.set_ticket(
        connection_id=session.connection_id, ticket_type_id='T1', amount=2
    )
    await add_or_release_seat_use_case.add_or_release_seat(
        connection_id=session.connection_id, seat_id='S1'
    )
    broadcast_notifier.reset_mock()
    return session


class TestDeleteLineItem:
    @pytest.mark.asyncio
    async def test_delete_ticket_line(
        self,
        delete_line_item_use_case: DeleteLineItemUseCase,
        broadcast_notifier: AsyncMock,
        filled_session: ConnectionSession,
    ) -> None:
        ticket_line = next(
            i for i in filled_session.current_cart().line_items if i.type == LineItemType.TICKET
        )

        cart = await delete_line_item_use_case.delete_line_item(
            connection_id=filled_session.connection_id, line_item_id=ticket_line.id
        )

        assert isinstance(cart, Cart)
        assert cart.held_quantity('T1') == 1
        assert cart.totals.gross_price == Decimal('50.00')
        assert published(broadcast_notifier, 'update-ticket') == [
            {'ticket_type_id': 'T1', 'ticket_kind': 'ticket', 'remaining_contingent': 9}
        ]
        assert published(broadcast_notifier, 'update-seat') == []

    @pytest.mark.asyncio
    async def test_delete_seat_line_frees_the_seat(
        self,
        delete_line_item_use_case: DeleteLineItemUseCase,
        broadcast_notifier: AsyncMock,
        filled_session: ConnectionSession,
    ) -> None:
        seat_line = next(
            i for i in filled_session.current_cart().line_items if i.type == LineItemType.SEAT
        )

        cart = await delete_line_item_use_case.delete_line_item(
            connection_id=filled_session.connection_id, line_item_id=seat_line.id
        )

        assert isinstance(cart, Cart)
        assert not cart.holds_seat('S1')
        assert published(broadcast_notifier, 'update-seat') == [{'seat_id': 'S1', 'state': 'free'}]

    @pytest.mark.asyncio
    async def test_unknown_line_item_is_rejected(
        self, delete_line_item_use_case: DeleteLineItemUseCase, filled_session: ConnectionSession
    ) -> None:
        result = await delete_line_item_use_case.delete_line_item(
            connection_id=filled_session.connection_id, line_item_id='missing'
        )

        assert is_rejection(result)
        assert result.reference_type == 'line_item'
        assert result.state == SeatState.NOT_FOUND
        assert len(filled_session.current_cart().line_items) == 3


class TestEmptyCart:
    @pytest.mark.asyncio
    async def test_empty_cart_releases_everything(
        self,
        empty_cart_use_case: EmptyCartUseCase,
        broadcast_notifier: AsyncMock,
        filled_session: ConnectionSession,
    ) -> None:
        cart = await empty_cart_use_case.empty_cart(connection_id=filled_session.connection_id)

        assert cart.line_items == []
        assert cart.totals.gross_price == Decimal('0')
        assert published(broadcast_notifier, 'update-ticket') == [
            {'ticket_type_id': 'T1', 'ticket_kind': 'ticket', 'remaining_contingent': 10}
        ]
        assert published(broadcast_notifier, 'update-event') == [
            {'event_id': EVENT_ID, 'remaining_visitor_capacity': 100}
        ]
        assert published(broadcast_notifier, 'update-seat') == [{'seat_id': 'S1', 'state': 'free'}]

    @pytest.mark.asyncio
    async def test_empty_cart_without_items(
        self,
        empty_cart_use_case: EmptyCartUseCase,
        broadcast_notifier: AsyncMock,
        connect: Connect,
    ) -> None:
        cart = await empty_cart_use_case.empty_cart(connection_id=connect().connection_id)

        assert cart.line_items == []
        broadcast_notifier.publish.assert_not_awaited()


class TestSetDiscount:
    @pytest.mark.asyncio
    async def test_discount_recomputes_totals(
        self, set_discount_use_case: SetDiscountUseCase, filled_session: ConnectionSession
    ) -> None:
        seat_line = next(
            i for i in filled_session.current_cart().line_items if i.type == LineItemType.SEAT
        )

        cart = await set_discount_use_case.set_discount(
            connection_id=filled_session.connection_id, line_item_id=seat_line.id, discount='8'
        )

        assert isinstance(cart, Cart)
        discounted = cart.find_item(seat_line.id)
        assert discounted is not None
        assert discounted.discount == Decimal('8.00')
        assert discounted.gross_price == Decimal('22.00')
        assert discounted.net_price == Decimal('20.00')
        assert cart.totals.gross_price == Decimal('62.00')

    @pytest.mark.asyncio
    async def test_full_discount_is_allowed(
        self, set_discount_use_case: SetDiscountUseCase, filled_session: ConnectionSession
    ) -> None:
        line = filled_session.current_cart().line_items[0]

        cart = await set_discount_use_case.set_discount(
            connection_id=filled_session.connection_id,
            line_item_id=line.id,
            discount=line.gross_regular,
        )

        assert isinstance(cart, Cart)
        assert cart.find_item(line.id).gross_price == Decimal('0.00')

    @pytest.mark.asyncio
    @pytest.mark.parametrize('discount', ['-1', '20.01', 'abc'])
    async def test_out_of_range_or_invalid_discount(
        self,
        set_discount_use_case: SetDiscountUseCase,
        filled_session: ConnectionSession,
        discount: str,
    ) -> None:
        ticket_line = next(
            i for i in filled_session.current_cart().line_items if i.type == LineItemType.TICKET
        )

        with pytest.raises(DomainError):
            await set_discount_use_case.set_discount(
                connection_id=filled_session.connection_id,
                line_item_id=ticket_line.id,
                discount=discount,
            )

        assert filled_session.current_cart().totals.gross_price == Decimal('70.00')

    @pytest.mark.asyncio
    async def test_external_connection_is_forbidden(
        self, set_discount_use_case: SetDiscountUseCase, connect: Connect
    ) -> None:
        with pytest.raises(ForbiddenError):
            await set_discount_use_case.set_discount(
                connection_id=connect().connection_id, line_item_id='any', discount='1'
            )

    @pytest.mark.asyncio
    async def test_unknown_line_item_is_rejected(
        self, set_discount_use_case: SetDiscountUseCase, filled_session: ConnectionSession
    ) -> None:
        result = await set_discount_use_case.set_discount(
            connection_id=filled_session.connection_id, line_item_id='missing', discount='1'
        )

        assert is_rejection(result)
        assert result.reference_type == 'line_item'


class TestConnectionLifecycle:
    @pytest.mark.asyncio
    async def test_open_connection_registers_session(
        self, inventory_repo, connection_registry
    ) -> None:
        use_case = OpenConnectionUseCase(
            inventory_query_repo=inventory_repo, connection_registry=connection_registry
        )

        session = await use_case.open_connection(
            event_id=EVENT_ID, order_from=OrderFrom.INTERNAL, user_id='clerk-1'
        )

        assert connection_registry.get_session(connection_id=session.connection_id) is session
        assert session.order_from == OrderFrom.INTERNAL
        assert session.cart is None

    @pytest.mark.asyncio
    async def test_open_connection_for_unknown_event(
        self, inventory_repo, connection_registry
    ) -> None:
        use_case = OpenConnectionUseCase(
            inventory_query_repo=inventory_repo, connection_registry=connection_registry
        )

        with pytest.raises(NotFoundError):
            await use_case.open_connection(event_id='no-such-event')

    @pytest.mark.asyncio
    async def test_release_frees_holds_for_everyone(
        self,
        release_connection_use_case: ReleaseConnectionUseCase,
        add_or_release_seat_use_case: AddOrReleaseSeatUseCase,
        connection_registry,
        broadcast_notifier: AsyncMock,
        filled_session: ConnectionSession,
        connect: Connect,
    ) -> None:
        other = connect()

        released = await release_connection_use_case.release_connection(
            connection_id=filled_session.connection_id
        )

        assert released is not None and len(released) == 3
        assert connection_registry.get_session(connection_id=filled_session.connection_id) is None
        assert published(broadcast_notifier, 'update-ticket') == [
            {'ticket_type_id': 'T1', 'ticket_kind': 'ticket', 'remaining_contingent': 10}
        ]
        assert published(broadcast_notifier, 'update-seat') == [{'seat_id': 'S1', 'state': 'free'}]

        cart = await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=other.connection_id, seat_id='S1'
        )
        assert isinstance(cart, Cart) and cart.holds_seat('S1')

    @pytest.mark.asyncio
    async def test_release_is_idempotent(
        self,
        release_connection_use_case: ReleaseConnectionUseCase,
        broadcast_notifier: AsyncMock,
        filled_session: ConnectionSession,
    ) -> None:
        await release_connection_use_case.release_connection(
            connection_id=filled_session.connection_id
        )
        broadcast_notifier.reset_mock()

        again = await release_connection_use_case.release_connection(
            connection_id=filled_session.connection_id
        )

        assert again is None
        broadcast_notifier.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_release_without_cart(
        self, release_connection_use_case: ReleaseConnectionUseCase, connect: Connect
    ) -> None:
        released = await release_connection_use_case.release_connection(
            connection_id=connect().connection_id
        )

        assert released == []


class TestQueries:
    @pytest.mark.asyncio
    async def test_get_cart_returns_snapshot(
        self, connection_registry, filled_session: ConnectionSession
    ) -> None:
        use_case = GetCartUseCase(connection_registry=connection_registry)

        cart = await use_case.get_cart(connection_id=filled_session.connection_id)

        assert cart.totals.gross_price == Decimal('70.00')
        assert cart.user_id == 'clerk-1'
        assert cart is not filled_session.cart

    @pytest.mark.asyncio
    async def test_get_cart_unknown_connection(self, connection_registry) -> None:
        with pytest.raises(NotFoundError):
            await GetCartUseCase(connection_registry=connection_registry).get_cart(
                connection_id='ghost'
            )

    @pytest.mark.asyncio
    async def test_availability_includes_live_holds(
        self, inventory_repo, connection_registry, filled_session: ConnectionSession
    ) -> None:
        inventory_repo.set_sold_count(ticket_type_id='P1', sold=1)
        use_case = GetEventAvailabilityUseCase(
            inventory_query_repo=inventory_repo, connection_registry=connection_registry
        )

        availability = await use_case.get_availability(event_id=EVENT_ID)

        remaining = {t.ticket_type_id: t.remaining_contingent for t in availability.tickets}
        assert remaining == {'T1': 8, 'P1': 2}
        assert availability.remaining_visitor_capacity == 98

    @pytest.mark.asyncio
    async def test_availability_unknown_event(self, inventory_repo, connection_registry) -> None:
        use_case = GetEventAvailabilityUseCase(
            inventory_query_repo=inventory_repo, connection_registry=connection_registry
        )

        with pytest.raises(NotFoundError):
            await use_case.get_availability(event_id='no-such-event')
