"""
Database client for the admin backend.

``DatabaseClient`` owns the async engine and session factory. It is built once
by the application entry point and handed to every handler and service, so
nothing in the data layer reaches for module-level connection state.
"""

import argparse
import asyncio
from sqlalchemy import event, inspect, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app import models  # noqa: F401
from app.config import Settings, get_settings
from app.models.base import Base
from app.utils.logger import setup_logger

logger = setup_logger("db")


def normalize_database_url(url: str) -> str:
    """Point plain PostgreSQL URLs at the asyncpg driver."""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseClient:
    """Async engine plus session factory for one database."""

    def __init__(self, url: str, *, schema: str | None = None, pool_size: int = 10):
        if not url:
            raise ValueError("DATABASE_URL environment variable not set")

        self.url = normalize_database_url(url)
        self.schema = schema
        self.is_sqlite = self.url.startswith("sqlite")

        engine_kwargs = {"echo": False, "pool_pre_ping": True}
        if not self.is_sqlite:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=pool_size * 2,
                pool_timeout=60,
                pool_recycle=300,
            )

        engine = create_async_engine(self.url, **engine_kwargs)
        if schema:
            engine = engine.execution_options(schema_translate_map={None: schema})
        if self.is_sqlite:
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.engine: AsyncEngine = engine
        self.session_factory = async_sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.debug(f"Database client configured for {self.engine.url!r}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseClient":
        return cls(
            settings.database_url,
            schema=settings.database_schema,
            pool_size=settings.database_pool_size,
        )

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def init_db(self) -> None:
        """Create the schema (when configured) and any missing tables."""
        async with self.engine.begin() as conn:
            if self.schema and not self.is_sqlite:
                await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{self.schema}"'))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema initialized.")

    async def reset_db(self) -> None:
        logger.warning("Dropping and recreating all roster tables.")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await self.init_db()

    async def check_connection(self) -> bool:
        """Run a trivial query to confirm the database is reachable."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(text("SELECT 1"))
                if result.scalar_one() != 1:
                    raise RuntimeError("Test query returned an unexpected result.")
        except Exception as e:
            logger.error(f"Failed to execute test query: {e}", exc_info=True)
            raise RuntimeError("Database connectivity check failed.") from e
        logger.info("Successfully connected to the database.")
        return True

    async def list_tables(self) -> list[str]:
        async with self.engine.connect() as conn:
            return await conn.run_sync(
                lambda sync_conn: sorted(
                    inspect(sync_conn).get_table_names(schema=self.schema)
                )
            )

    async def get_table_columns(self, table_name: str) -> set[str]:
        """Column names of ``table_name`` as they exist in the live database."""
        async with self.engine.connect() as conn:
            columns = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_columns(
                    table_name, schema=self.schema
                )
            )
        return {column["name"] for column in columns}

    async def close(self) -> None:
        logger.info("Closing database connections.")
        await self.engine.dispose()


async def _run_action(action: str) -> None:
    client = DatabaseClient.from_settings(get_settings())
    try:
        if action == "init":
            await client.init_db()
        elif action == "reset":
            await client.reset_db()
        elif action == "list-tables":
            for table in await client.list_tables():
                print(table)
        elif action == "check":
            await client.check_connection()
        elif action == "capabilities":
            from app.services.capabilities import SchemaCapabilities

            capabilities = await SchemaCapabilities.probe(client)
            for table, supported in capabilities.image_columns.items():
                print(f"{table}.image_url: {'yes' if supported else 'no'}")
    finally:
        await client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Roster database utility")
    parser.add_argument(
        "action",
        choices=["init", "reset", "list-tables", "check", "capabilities"],
        help="'init' creates missing tables, 'reset' drops and recreates them, "
        "'list-tables' prints existing tables, 'check' tests connectivity, "
        "'capabilities' reports which tables carry an image column.",
    )
    args = parser.parse_args()

    if args.action == "reset":
        confirm = input(
            "WARNING: This will delete all roster data. Are you sure? (yes/no): "
        )
        if confirm.lower() != "yes":
            logger.info("Database reset cancelled by user.")
            raise SystemExit(0)

    asyncio.run(_run_action(args.action))
    logger.info("Database utility script finished.")
