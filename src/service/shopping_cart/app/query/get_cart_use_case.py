from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.app.interface import IConnectionRegistry
from src.service.shopping_cart.domain.entity.cart_entity import Cart


class GetCartUseCase:
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
    async def get_cart(self, *, connection_id: str) -> Cart:
        session = self.connection_registry.get_session(connection_id=connection_id)
        if session is None:
            raise NotFoundError('Connection not found')
        return session.current_cart().snapshot()
