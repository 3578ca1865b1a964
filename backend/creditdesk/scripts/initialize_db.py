import asyncio
import logging

from sqlalchemy import inspect
from alembic.config import Config
from alembic import command

from creditdesk.database import engine, Base
import creditdesk.models  # noqa: F401  registers models on Base.metadata

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ALEMBIC_INI = "alembic.ini"


async def initialize_db():
    """
    Initialize the database for production.
    If the database is empty, it creates all tables and stamps Alembic to head.
    If the database exists, it runs migrations to reach head.
    """
    logger.info("Starting database initialization...")

    async with engine.begin() as conn:
        def check_if_fresh(sync_conn):
            return 'users' not in inspect(sync_conn).get_table_names()

        is_fresh_install = await conn.run_sync(check_if_fresh)
        logger.info(f"Is fresh install? {is_fresh_install}")

        if is_fresh_install:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("All tables created.")

    # Alembic runs its own event loop, keep it off ours
    alembic_cfg = Config(ALEMBIC_INI)
    if is_fresh_install:
        await asyncio.to_thread(command.stamp, alembic_cfg, "head")
        logger.info("Alembic stamped to head.")
    else:
        await asyncio.to_thread(command.upgrade, alembic_cfg, "head")
        logger.info("Migrations applied.")

    await engine.dispose()
    logger.info("Database initialization complete.")


if __name__ == "__main__":
    asyncio.run(initialize_db())
