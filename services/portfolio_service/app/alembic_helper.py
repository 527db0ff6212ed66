import asyncio
import os

from alembic import command
from alembic.config import Config
from loguru import logger


def _alembic_config(database_dsn: str) -> Config | None:
    base_dir = os.path.dirname(os.path.abspath(__file__))
    alembic_ini_path = os.path.join(base_dir, "db", "migrations", "alembic.ini")
    if not os.path.exists(alembic_ini_path):
        logger.warning(f"Alembic config not found at {alembic_ini_path}, skipping migrations.")
        return None
    alembic_cfg = Config(alembic_ini_path)
    # ConfigParser interpolation treats "%" specially
    alembic_cfg.set_main_option("sqlalchemy.url", database_dsn.replace("%", "%%"))
    return alembic_cfg


async def run_alembic_migrations(database_dsn: str) -> None:
    """Upgrade the portfolio schema to head using the sync DSN."""
    alembic_cfg = _alembic_config(database_dsn)
    if alembic_cfg is None:
        return
    try:
        logger.info("🚀 Running Alembic migrations (portfolio)...")
        await asyncio.to_thread(command.upgrade, alembic_cfg, "head")
        logger.info("✅ Alembic migrations applied successfully (portfolio).")
    except Exception as e:
        logger.error(f"❌ Alembic migration failed (portfolio): {e}")
        raise
