"""
Production FastAPI Application

Shopping cart websocket service with inventory read side and tracing.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.constant.path import BASE_DIR
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.shopping_cart.driven_adapter.repo.inventory_seed import read_seed_file


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Shopping Cart] Starting up...')

    tracing = TracingConfig(service_name='shopping-cart-service')
    tracing.setup()
    Logger.base.info('📊 [Shopping Cart] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Shopping Cart] Dependency injection wired')

    database = None
    if settings.INVENTORY_BACKEND == 'sql':
        database = container.database()
        tracing.instrument_sqlalchemy(engine=database.engine)
        Logger.base.info('🗄️  [Shopping Cart] SQL inventory ready + instrumented')
    elif settings.SEED_FILE:
        seed_file = Path(settings.SEED_FILE)
        if not seed_file.is_absolute():
            seed_file = BASE_DIR / seed_file
        container.inventory_query_repo().load_seed(read_seed_file(seed_file))
        Logger.base.info(f'🌱 [Shopping Cart] In-memory inventory seeded from {seed_file}')
    else:
        Logger.base.warning('⚠️ [Shopping Cart] In-memory inventory is empty (no SEED_FILE)')

    Logger.base.info('✅ [Shopping Cart] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Shopping Cart] Shutting down...')

    if database is not None:
        await database.dispose()

    tracing.shutdown()
    Logger.base.info('📊 [Shopping Cart] Tracing shutdown complete')

    container.unwire()
    Logger.base.info('👋 [Shopping Cart] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
