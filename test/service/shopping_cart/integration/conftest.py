"""
Integration fixtures: the test app over the wired container, with the
inventory replaced by the seeded in-memory repository.
"""

from collections.abc import Generator

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from src.platform.config.di import container
from src.service.shopping_cart.driven_adapter.repo.in_memory_inventory_query_repo_impl import (
    InMemoryInventoryQueryRepoImpl,
)
from test.test_main import app


@pytest.fixture
def client(inventory_repo: InMemoryInventoryQueryRepoImpl) -> Generator[TestClient, None, None]:
    container.inventory_query_repo.override(providers.Object(inventory_repo))
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        container.inventory_query_repo.reset_override()
