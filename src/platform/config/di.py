"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.event.in_memory_broadcaster import InMemoryEventBroadcasterImpl
from src.platform.state.resource_lock import ResourceLock
from src.service.shopping_cart.driven_adapter.repo.in_memory_inventory_query_repo_impl import (
    InMemoryInventoryQueryRepoImpl,
)
from src.service.shopping_cart.driven_adapter.repo.sql_inventory_query_repo_impl import (
    SqlInventoryQueryRepoImpl,
)
from src.service.shopping_cart.driven_adapter.state.in_memory_connection_registry_impl import (
    InMemoryConnectionRegistryImpl,
)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (only built when the sql inventory backend is selected)
    database = providers.Singleton(
        Database,
        db_url=config_service.provided.DATABASE_URL,
        pool_size=config_service.provided.DB_POOL_SIZE,
        echo=config_service.provided.DB_ECHO,
    )

    # Inventory read side, chosen by INVENTORY_BACKEND
    inventory_query_repo = providers.Selector(
        config_service.provided.INVENTORY_BACKEND,
        memory=providers.Singleton(InMemoryInventoryQueryRepoImpl),
        sql=providers.Singleton(
            SqlInventoryQueryRepoImpl, session_factory=database.provided.session
        ),
    )

    # Live connections and their carts (process-local)
    connection_registry = providers.Singleton(InMemoryConnectionRegistryImpl)

    # Per-event pub/sub for update-ticket / update-event / update-seat
    broadcast_notifier = providers.Singleton(
        InMemoryEventBroadcasterImpl,
        buffer_size=config_service.provided.BROADCAST_BUFFER_SIZE,
    )

    # Per-resource locks: (event, 'ticket', id) / (event, 'visitors') / (event, 'seat', id)
    resource_lock = providers.Singleton(ResourceLock)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
