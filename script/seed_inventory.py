#!/usr/bin/env python3
"""
Inventory Seed Script
Populate the relational inventory store from a JSON seed file

Features:
1. Create Tables - create inventory tables if missing
2. Insert Seed - events, rooms, tables, ticket types, seats and sold counts

Notes:
- Only needed for INVENTORY_BACKEND=sql; the in-memory backend reads SEED_FILE on startup
- Usage: python -m script.seed_inventory [path/to/seed.json]
"""

import sys
from pathlib import Path

import anyio

from src.platform.config.core_setting import settings
from src.platform.constant.path import SEED_DIR
from src.platform.database.orm_db_setting import Database
from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.driven_adapter.repo.inventory_seed import (
    read_seed_file,
    seed_sql_inventory,
)

DEFAULT_SEED_FILE = SEED_DIR / 'demo_event.json'


async def main(seed_file: Path) -> None:
    database = Database(
        db_url=settings.DATABASE_URL, pool_size=settings.DB_POOL_SIZE, echo=settings.DB_ECHO
    )
    try:
        await database.create_tables()
        Logger.base.info('🗄️  [SEED] Tables ensured')

        async with database.session() as session:
            await seed_sql_inventory(session, read_seed_file(seed_file))

        Logger.base.info(f'✅ [SEED] Inventory seeded from {seed_file}')
    finally:
        await database.dispose()


if __name__ == '__main__':
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_SEED_FILE
    anyio.run(main, path)
