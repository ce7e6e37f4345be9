from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import uuid7

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.shopping_cart_metrics import metrics
from src.service.shopping_cart.app.interface import IConnectionRegistry, IInventoryQueryRepo
from src.service.shopping_cart.domain.entity.connection_session_entity import ConnectionSession
from src.service.shopping_cart.domain.enum import OrderFrom


class OpenConnectionUseCase:
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
    async def open_connection(
        self,
        *,
        event_id: str,
        order_from: OrderFrom = OrderFrom.EXTERNAL,
        user_id: Optional[str] = None,
    ) -> ConnectionSession:
        """Register a new connection for an event; the cart is created on first use."""
        event = await self.inventory_query_repo.get_event(event_id=event_id)
        if event is None:
            raise NotFoundError(f'Event {event_id} not found')

        session = self.connection_registry.register(
            connection_id=str(uuid7()),
            event_id=event_id,
            order_from=order_from,
            user_id=user_id,
        )
        metrics.active_connections.labels(event_id=event_id).inc()
        Logger.base.info(
            f'🔌 [CONNECT] {session.connection_id} joined event {event_id} ({order_from})'
        )
        return session
