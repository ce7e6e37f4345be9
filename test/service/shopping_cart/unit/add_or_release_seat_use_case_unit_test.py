import asyncio
from decimal import Decimal
from typing import Callable
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import NotFoundError
from src.service.shopping_cart.app.command.add_or_release_seat_use_case import (
    AddOrReleaseSeatUseCase,
)
from src.service.shopping_cart.app.dto import Rejection, is_rejection
from src.service.shopping_cart.domain.entity.cart_entity import Cart
from src.service.shopping_cart.domain.entity.connection_session_entity import ConnectionSession
from src.service.shopping_cart.domain.enum import LineItemType, SeatState
from test.service.shopping_cart.cart_test_helper import published


Connect = Callable[..., ConnectionSession]


class TestSeatToggle:
    @pytest.mark.asyncio
    async def test_add_block_release_retry(
        self,
        add_or_release_seat_use_case: AddOrReleaseSeatUseCase,
        broadcast_notifier: AsyncMock,
        connect: Connect,
    ) -> None:
        first, second = connect(), connect()

        added = await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=first.connection_id, seat_id='S1'
        )
        blocked = await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=second.connection_id, seat_id='S1'
        )
        released = await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=first.connection_id, seat_id='S1'
        )
        retried = await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=second.connection_id, seat_id='S1'
        )

        assert isinstance(added, Cart) and added.holds_seat('S1')
        assert blocked == Rejection(reference_id='S1', state=SeatState.BLOCKED)
        assert isinstance(released, Cart) and not released.holds_seat('S1')
        assert isinstance(retried, Cart) and retried.holds_seat('S1')
        assert published(broadcast_notifier, 'update-seat') == [
            {'seat_id': 'S1', 'state': 'blocked'},
            {'seat_id': 'S1', 'state': 'free'},
            {'seat_id': 'S1', 'state': 'blocked'},
        ]

    @pytest.mark.asyncio
    async def test_seat_line_carries_price_and_location(
        self, add_or_release_seat_use_case: AddOrReleaseSeatUseCase, connect: Connect
    ) -> None:
        cart = await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=connect().connection_id, seat_id='S2'
        )

        assert isinstance(cart, Cart)
        (item,) = cart.line_items
        assert item.type == LineItemType.SEAT
        assert item.text == 'Table 1/2'
        assert cart.totals.gross_price == Decimal('45.00')
        assert cart.totals.net_price == Decimal('40.91')
        assert cart.totals.tax_price == Decimal('4.09')

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_cart(
        self, add_or_release_seat_use_case: AddOrReleaseSeatUseCase, connect: Connect
    ) -> None:
        session = connect()

        await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=session.connection_id, seat_id='S1'
        )
        cart = await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=session.connection_id, seat_id='S1'
        )

        assert isinstance(cart, Cart)
        assert cart.line_items == []
        assert cart.totals.gross_price == Decimal('0')


class TestSeatRejections:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'seat_id, state',
        [
            ('S_SOLD', SeatState.SOLD),
            ('S_RESERVED', SeatState.RESERVED),
            ('S404', SeatState.NOT_FOUND),
        ],
    )
    async def test_unavailable_seats_are_rejected(
        self,
        add_or_release_seat_use_case: AddOrReleaseSeatUseCase,
        broadcast_notifier: AsyncMock,
        connect: Connect,
        seat_id: str,
        state: SeatState,
    ) -> None:
        session = connect()

        result = await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=session.connection_id, seat_id=seat_id
        )

        assert is_rejection(result)
        assert result.state == state
        assert result.reference_id == seat_id
        assert session.current_cart().line_items == []
        broadcast_notifier.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_seat_of_another_event_is_not_found(
        self, add_or_release_seat_use_case: AddOrReleaseSeatUseCase, connect: Connect
    ) -> None:
        result = await add_or_release_seat_use_case.add_or_release_seat(
            connection_id=connect(event_id='event-small').connection_id, seat_id='S1'
        )

        assert is_rejection(result)
        assert result.state == SeatState.NOT_FOUND

    @pytest.mark.asyncio
    async def test_unknown_connection(
        self, add_or_release_seat_use_case: AddOrReleaseSeatUseCase
    ) -> None:
        with pytest.raises(NotFoundError):
            await add_or_release_seat_use_case.add_or_release_seat(
                connection_id='ghost', seat_id='S1'
            )


class TestSeatConcurrency:
    @pytest.mark.asyncio
    async def test_exactly_one_connection_wins_a_race(
        self,
        add_or_release_seat_use_case: AddOrReleaseSeatUseCase,
        connection_registry,
        connect: Connect,
    ) -> None:
        sessions = [connect() for _ in range(5)]

        results = await asyncio.gather(
            *(
                add_or_release_seat_use_case.add_or_release_seat(
                    connection_id=s.connection_id, seat_id='S1'
                )
                for s in sessions
            )
        )

        winners = [r for r in results if isinstance(r, Cart)]
        losers = [r for r in results if is_rejection(r)]
        assert len(winners) == 1
        assert all(r.state == SeatState.BLOCKED for r in losers)
        holders = [
            s.connection_id
            for s in connection_registry.list_sessions(event_id='event-1')
            if s.cart is not None and s.cart.holds_seat('S1')
        ]
        assert len(holders) == 1
