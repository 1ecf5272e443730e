"""Local customer cache backed by SQLite through async SQLAlchemy.

The cache is keyed by customer id and never evicts. It is written after every
successful page fetch and read back in full when the API is unreachable.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import delete, event, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..errors import PersistenceError, SchemaMismatchError
from ..schemas import Customer
from .models import Base, CustomerRow, StoreMeta

logger = logging.getLogger(__name__)

SCHEMA_VERSION_KEY = "schema_version"

# sqlite3 raises OverflowError (not a DBAPI error) for ids outside signed 64-bit.
_ROW_ERRORS = (SQLAlchemyError, OverflowError)


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy own BEGIN so SAVEPOINT/ROLLBACK TO nest inside it."""

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


class CustomerCache:
    """Persistent customer store.

    Usage:
        async with CustomerCache("sqlite+aiosqlite:///customers.db", schema_version=1) as cache:
            await cache.upsert_many(customers)
            cached = await cache.get_all()
    """

    def __init__(
        self,
        database_url: str | None = None,
        schema_version: int | None = None,
        echo: bool = False,
    ):
        if database_url is None or schema_version is None:
            from ..config import settings

            database_url = database_url or settings.database_url
            schema_version = settings.schema_version if schema_version is None else schema_version
        self.database_url = database_url
        self.schema_version = schema_version
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self, schema_version: int | None = None) -> "CustomerCache":
        """Open the store, rebuilding it if the on-disk schema version differs."""
        if self.is_open:
            return self
        if schema_version is not None:
            self.schema_version = schema_version

        engine = create_async_engine(self.database_url, echo=self.echo)
        if engine.dialect.name == "sqlite":
            _enable_sqlite_savepoints(engine)
        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

        try:
            await self._ensure_schema()
        except SQLAlchemyError as e:
            await self.close()
            raise PersistenceError(f"Could not open customer cache at {self.database_url}") from e
        return self

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    async def __aenter__(self) -> "CustomerCache":
        return await self.open()

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def _ensure_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with self._session_factory() as db:
            meta = await db.get(StoreMeta, SCHEMA_VERSION_KEY)
            if meta is None:
                rows = (await db.execute(select(func.count()).select_from(CustomerRow))).scalar_one()
                found = None if rows == 0 else "unversioned"
            else:
                found = meta.value

        if found is not None and found != str(self.schema_version):
            err = SchemaMismatchError(found, self.schema_version)
            logger.warning("%s; rebuilding local customer cache", err)
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
                await conn.run_sync(Base.metadata.create_all)
            found = None

        if found is None:
            async with self._session_factory() as db:
                db.add(StoreMeta(key=SCHEMA_VERSION_KEY, value=str(self.schema_version)))
                await db.commit()

    def _session(self) -> AsyncSession:
        if self._session_factory is None:
            raise PersistenceError("Customer cache is not open")
        return self._session_factory()

    # =========================================================================
    # Writes
    # =========================================================================

    async def _write(self, db: AsyncSession, customer: Customer) -> None:
        """Insert or overwrite one row. No commit; callers batch commits."""
        existing = await db.get(CustomerRow, customer.id)
        if existing:
            existing.apply(customer)
            await db.flush()
            return

        row = CustomerRow(id=customer.id)
        row.apply(customer)
        db.add(row)
        await db.flush()

    async def upsert(self, customer: Customer) -> None:
        """Insert or replace a single customer by id."""
        async with self._session() as db:
            try:
                await self._write(db, customer)
                await db.commit()
            except _ROW_ERRORS as e:
                await db.rollback()
                raise PersistenceError(f"Failed to cache customer {customer.id}") from e

    async def upsert_many(self, customers: Iterable[Customer]) -> int:
        """Upsert a page of customers in one transaction.

        Each record gets its own savepoint: a record that fails to write is
        skipped and logged, the rest of the batch still commits.

        Returns:
            Number of customers written.
        """
        written = 0
        async with self._session() as db:
            try:
                for customer in customers:
                    try:
                        async with db.begin_nested():
                            await self._write(db, customer)
                    except _ROW_ERRORS as e:
                        err = PersistenceError(f"Failed to cache customer {customer.id}")
                        logger.warning("%s, skipping: %s", err, e)
                        continue
                    written += 1
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                raise PersistenceError("Failed to commit customer batch") from e
        return written

    async def clear(self) -> int:
        """Delete every cached customer. Returns the number removed."""
        async with self._session() as db:
            try:
                result = await db.execute(delete(CustomerRow))
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                raise PersistenceError("Failed to clear customer cache") from e
        return result.rowcount or 0

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_all(self) -> list[Customer]:
        """Every cached customer, ordered by id."""
        async with self._session() as db:
            try:
                rows = (await db.execute(select(CustomerRow).order_by(CustomerRow.id))).scalars().all()
            except SQLAlchemyError as e:
                raise PersistenceError("Failed to read customer cache") from e
        return [row.to_customer() for row in rows]

    async def get(self, customer_id: int) -> Customer | None:
        async with self._session() as db:
            try:
                row = await db.get(CustomerRow, customer_id)
            except _ROW_ERRORS as e:
                raise PersistenceError(f"Failed to read customer {customer_id}") from e
        return row.to_customer() if row else None

    async def count(self) -> int:
        async with self._session() as db:
            try:
                return (await db.execute(select(func.count()).select_from(CustomerRow))).scalar_one()
            except SQLAlchemyError as e:
                raise PersistenceError("Failed to count cached customers") from e
