from decimal import Decimal, InvalidOperation
from typing import Any, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.shopping_cart_metrics import metrics
from src.service.shopping_cart.app.dto import CartResult, Rejection
from src.service.shopping_cart.app.interface import IConnectionRegistry
from src.service.shopping_cart.domain.enum import SeatState
from src.service.shopping_cart.domain.value_object.money import ZERO, round_half_up, to_decimal


class SetDiscountUseCase:
    """Box office only: per line item discount, 0 <= discount <= unit gross."""

    def __init__(self, *, connection_registry: IConnectionRegistry) -> None:
        self.connection_registry = connection_registry

    @classmethod
    @inject
    def depends(
        cls,
        connection_registry: IConnectionRegistry = Depends(
            Provide[Container.connection_registry]
        ),
    ) -> Self:
        return cls(connection_registry=connection_registry)

    @Logger.io
    async def set_discount(
        self, *, connection_id: str, line_item_id: str, discount: Any
    ) -> CartResult:
        session = self.connection_registry.get_session(connection_id=connection_id)
        if session is None:
            raise NotFoundError('Connection not found')
        cart = session.get_or_create_cart()
        if not cart.is_internal:
            raise ForbiddenError('Only internal connections may set discounts')

        try:
            value: Decimal = round_half_up(to_decimal(discount))
        except (InvalidOperation, ValueError):
            raise DomainError(f'Invalid discount: {discount}')

        item = cart.find_item(line_item_id)
        if item is None:
            Logger.base.warning(f'⚠️ [DISCOUNT] Line item {line_item_id} not in cart')
            metrics.record_operation(
                event_id=session.event_id, operation='set_discount', result='rejected'
            )
            return Rejection(
                reference_id=line_item_id, state=SeatState.NOT_FOUND, reference_type='line_item'
            )

        if value < ZERO or value > item.gross_regular:
            raise DomainError(f'Discount must be between 0 and {item.gross_regular}')

        item.discount = value
        cart.recalculate()
        metrics.record_operation(event_id=session.event_id, operation='set_discount', result='success')
        Logger.base.info(
            f'🏷️ [DISCOUNT] {value} on {item.type} {item.reference_id} for connection {connection_id}'
        )
        return cart.snapshot()
