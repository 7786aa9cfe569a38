"""Create the database schema for the recruiting analytics API.

Run this before starting the API server. Pass ``--drop`` to recreate all
tables from scratch.
"""

import asyncio
import logging
import sys

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from recruit.config import settings
from recruit.db import engine
from recruit.models import Base

logger = logging.getLogger("init_db")


@retry(
    stop=stop_after_attempt(settings.db.connect_attempts),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((OperationalError, OSError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def create_schema(drop: bool = False):
    """Create all database tables, waiting for the server to accept connections."""
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
            print("✓ Dropped existing tables")

        await conn.run_sync(Base.metadata.create_all)
        print("✓ Created all tables")


async def init_database(drop: bool = False):
    print(f"Initializing database: {settings.db.url.split('@')[-1]}")

    try:
        await create_schema(drop=drop)
    finally:
        await engine.dispose()

    print("\n✅ Database initialization complete!")
    print(f"Tables: {', '.join(Base.metadata.tables.keys())}")


async def main():
    """Main entry point."""
    logging.basicConfig(level=logging.INFO)
    try:
        await init_database(drop="--drop" in sys.argv[1:])
    except (SQLAlchemyError, OSError) as e:
        print(f"\n❌ Error initializing database: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
