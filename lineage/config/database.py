"""
Database Configuration
======================

PostgreSQL connection configuration for the post and relation repositories,
plus the bundled schema migrations.

Connection details come from Settings, so POSTGRES_* variables and
DATABASE_URL are read from the environment or the .env file alike.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / 'migrations'


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""
    dsn: str
    min_size: int = 2
    max_size: int = 10

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        min_size: int = 2,
        max_size: int = 10,
    ) -> 'PostgresConfig':
        """Create config from application settings (DATABASE_URL or POSTGRES_* parts)."""
        settings = settings or get_settings()
        return cls(dsn=settings.database_url, min_size=min_size, max_size=max_size)

    def to_asyncpg_kwargs(self) -> dict:
        """Convert to asyncpg.create_pool kwargs."""
        return {
            'dsn': self.dsn,
            'min_size': self.min_size,
            'max_size': self.max_size,
        }


def get_postgres_config(
    settings: Optional[Settings] = None,
    min_size: int = 2,
    max_size: int = 10,
) -> PostgresConfig:
    """Get PostgreSQL configuration from settings."""
    return PostgresConfig.from_settings(settings, min_size=min_size, max_size=max_size)


async def create_postgres_pool(
    settings: Optional[Settings] = None,
    min_size: int = 2,
    max_size: int = 10,
):
    """Create PostgreSQL connection pool from settings."""
    import asyncpg
    config = get_postgres_config(settings, min_size=min_size, max_size=max_size)
    return await asyncpg.create_pool(**config.to_asyncpg_kwargs())


def migration_files() -> List[Path]:
    """Bundled SQL migrations, in the order they must run."""
    return sorted(MIGRATIONS_DIR.glob('*.sql'))


async def run_migrations(pool) -> int:
    """
    Apply bundled migrations. Each file is idempotent (IF NOT EXISTS).

    Returns:
        Number of files applied
    """
    files = migration_files()
    async with pool.acquire() as conn:
        for path in files:
            await conn.execute(path.read_text())
            logger.info(f"Applied migration {path.name}")
    return len(files)
