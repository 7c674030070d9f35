"""
Persistent ledger storage on SQLite through aiosqlite.

Use it for dry runs of a migration that must survive a restart, and for
checking atomicity against a real database. One process per file.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any

import aiosqlite
from pydantic import ValidationError

from tokenmigration.events.base import LedgerEvent
from tokenmigration.events.registry import EventRegistry, EventTypeNotFoundError, default_registry
from tokenmigration.exceptions import EventStoreError, OptimisticLockError, SerializationError
from tokenmigration.observability import (
    ATTR_CONTRACT_ADDRESS,
    ATTR_DB_NAME,
    ATTR_DB_SYSTEM,
    ATTR_EVENT_COUNT,
    ATTR_FROM_VERSION,
    ATTR_POSITION,
    ATTR_STREAM_COUNT,
    ATTR_TRANSACTION_ID,
    Tracer,
    create_tracer,
)
from tokenmigration.stores.interface import (
    CommitBatch,
    CommitResult,
    EventStore,
    EventStream,
    ReadOptions,
    StoredEvent,
)

logger = logging.getLogger(__name__)

SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS contracts (
    address TEXT PRIMARY KEY,
    contract_type TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS events (
    global_position INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id TEXT NOT NULL UNIQUE,
    event_type TEXT NOT NULL,
    contract_address TEXT NOT NULL REFERENCES contracts(address),
    version INTEGER NOT NULL,
    transaction_id TEXT,
    sender TEXT,
    occurred_at TEXT NOT NULL,
    payload TEXT NOT NULL,
    stored_at TEXT NOT NULL,
    UNIQUE (contract_address, version)
);

CREATE INDEX IF NOT EXISTS idx_events_transaction ON events (transaction_id);
"""


class SQLiteEventStore(EventStore):
    """
    Ledger streams in a single SQLite file.

    Each contract gets a row in ``contracts``; its events live in ``events``
    keyed by ``(contract_address, version)``, with the pydantic payload as
    JSON text and ``global_position`` as the autoincrement key. ``commit``
    wraps a batch in ``BEGIN IMMEDIATE`` so a migration lands whole or not
    at all. Reads and commits share one connection and take the same
    asyncio lock, so a reader never sees rows of an open commit.

    Example:
        >>> async with SQLiteEventStore("ledger.db") as store:
        ...     await store.initialize()
        ...     ledger = Ledger(store)
    """

    def __init__(
        self,
        database: str,
        event_registry: EventRegistry | None = None,
        *,
        wal_mode: bool = True,
        busy_timeout: int = 5000,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Args:
            database: File path, or ':memory:' for a throwaway database
            event_registry: Resolves stored type names; the default registry if omitted
            wal_mode: Use write-ahead logging (file databases only)
            busy_timeout: Milliseconds to wait on a locked database
            tracer: Tracer to use instead of one built from ``enable_tracing``
            enable_tracing: Whether the built tracer emits OpenTelemetry spans
        """
        self._database = database
        self._event_registry = event_registry if event_registry is not None else default_registry
        self._wal_mode = wal_mode
        self._busy_timeout = busy_timeout
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    async def __aenter__(self) -> SQLiteEventStore:
        await self._open_connection()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _open_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            # isolation_level=None: commit() issues BEGIN/COMMIT itself
            conn = await aiosqlite.connect(self._database, isolation_level=None)
            pragmas = ["foreign_keys = ON", f"busy_timeout = {self._busy_timeout}"]
            if self._wal_mode and self._database != ":memory:":
                pragmas.append("journal_mode = WAL")
            for pragma in pragmas:
                await conn.execute(f"PRAGMA {pragma}")
            conn.row_factory = aiosqlite.Row
            self._connection = conn
            logger.debug("Opened %s with %s", self._database, ", ".join(pragmas))
        return self._connection

    async def close(self) -> None:
        """Close the connection if open."""
        if self._connection is None:
            return
        await self._connection.close()
        self._connection = None
        logger.debug("Closed %s", self._database)

    async def initialize(self) -> None:
        """Open the database if needed and create any missing tables."""
        conn = await self._open_connection()
        await conn.executescript(SQLITE_SCHEMA)
        logger.info("SQLite ledger schema ready in %s", self._database)

    def _ensure_connected(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise EventStoreError(
                f"SQLite store for {self._database} is not open; "
                "call initialize() or use 'async with'"
            )
        return self._connection

    async def commit(self, batch: CommitBatch) -> CommitResult:
        """
        Atomically append all events of a batch.

        Raises:
            OptimisticLockError: If any stream is not at its expected version
            EventStoreError: If the database rejects the batch
        """
        if batch.is_empty:
            return CommitResult(
                transaction_id=batch.transaction_id,
                event_count=0,
                global_position=await self.get_global_position(),
            )

        with self._tracer.span(
            "tokenmigration.sqlite_store.commit",
            {
                ATTR_TRANSACTION_ID: str(batch.transaction_id),
                ATTR_EVENT_COUNT: len(batch.events),
                ATTR_STREAM_COUNT: batch.stream_count,
                ATTR_DB_SYSTEM: "sqlite",
                ATTR_DB_NAME: self._database,
            },
        ):
            async with self._lock:
                return await self._do_commit(batch)

    async def _do_commit(self, batch: CommitBatch) -> CommitResult:
        conn = self._ensure_connected()
        now = datetime.now(UTC).isoformat()

        await conn.execute("BEGIN IMMEDIATE")
        try:
            for expectation in batch.expectations:
                current_version = await self._current_version(conn, expectation.address)
                if current_version != expectation.expected_version:
                    raise OptimisticLockError(
                        expectation.address, expectation.expected_version, current_version
                    )
                stored_type = await self._contract_type(conn, expectation.address)
                if stored_type is None:
                    await conn.execute(
                        "INSERT INTO contracts (address, contract_type, created_at) "
                        "VALUES (?, ?, ?)",
                        (expectation.address, expectation.contract_type, now),
                    )
                elif stored_type != expectation.contract_type:
                    raise EventStoreError(
                        f"Stream {expectation.address} holds {stored_type}, "
                        f"not {expectation.contract_type}"
                    )

            last_position = 0
            for event in batch.events:
                cursor = await conn.execute(
                    """
                    INSERT INTO events (
                        event_id, event_type, contract_address, version,
                        transaction_id, sender, occurred_at, payload, stored_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(event.event_id),
                        event.event_type,
                        event.contract_address,
                        event.sequence,
                        str(event.transaction_id) if event.transaction_id else None,
                        event.sender,
                        event.occurred_at.isoformat(),
                        json.dumps(event.to_dict()),
                        now,
                    ),
                )
                last_position = cursor.lastrowid or last_position

            versions = {
                e.address: await self._current_version(conn, e.address)
                for e in batch.expectations
            }
            await conn.execute("COMMIT")
        except aiosqlite.IntegrityError as e:
            await conn.execute("ROLLBACK")
            logger.debug("Rolled back transaction %s: %s", batch.transaction_id, e)
            raise EventStoreError(f"Integrity error committing batch: {e}") from e
        except BaseException:
            await conn.execute("ROLLBACK")
            logger.debug("Rolled back transaction %s", batch.transaction_id)
            raise

        logger.debug(
            "Committed %d events across %d streams for transaction %s",
            len(batch.events),
            batch.stream_count,
            batch.transaction_id,
        )
        return CommitResult(
            transaction_id=batch.transaction_id,
            event_count=len(batch.events),
            global_position=last_position,
            versions=versions,
        )

    async def _current_version(self, conn: aiosqlite.Connection, address: str) -> int:
        cursor = await conn.execute(
            "SELECT COALESCE(MAX(version), 0) FROM events WHERE contract_address = ?",
            (address,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def get_events(self, address: str, from_version: int = 0) -> EventStream:
        with self._tracer.span(
            "tokenmigration.sqlite_store.get_events",
            {
                ATTR_CONTRACT_ADDRESS: address,
                ATTR_FROM_VERSION: from_version,
                ATTR_DB_SYSTEM: "sqlite",
            },
        ):
            conn = self._ensure_connected()
            async with self._lock:
                contract_type = await self._contract_type(conn, address)
                if contract_type is None:
                    return EventStream.empty(address)

                cursor = await conn.execute(
                    """
                    SELECT event_type, payload FROM events
                    WHERE contract_address = ? AND version > ?
                    ORDER BY version ASC
                    """,
                    (address, from_version),
                )
                rows = await cursor.fetchall()
                version = await self._current_version(conn, address)
            return EventStream(
                address=address,
                contract_type=contract_type,
                events=[self._deserialize_event(row[0], row[1]) for row in rows],
                version=version,
            )

    async def get_stream_version(self, address: str) -> int:
        conn = self._ensure_connected()
        async with self._lock:
            return await self._current_version(conn, address)

    async def get_contract_type(self, address: str) -> str | None:
        conn = self._ensure_connected()
        async with self._lock:
            return await self._contract_type(conn, address)

    async def _contract_type(self, conn: aiosqlite.Connection, address: str) -> str | None:
        cursor = await conn.execute(
            "SELECT contract_type FROM contracts WHERE address = ?", (address,)
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def read_all(self, options: ReadOptions | None = None) -> AsyncIterator[StoredEvent]:
        options = options or ReadOptions()
        conn = self._ensure_connected()

        query_parts = [
            """
            SELECT global_position, version, event_type, payload, stored_at
            FROM events
            WHERE global_position > ?
            """
        ]
        params: list[Any] = [options.from_position]
        if options.contract_address is not None:
            query_parts.append("AND contract_address = ?")
            params.append(options.contract_address)
        if options.transaction_id is not None:
            query_parts.append("AND transaction_id = ?")
            params.append(str(options.transaction_id))
        query_parts.append("ORDER BY global_position ASC")
        if options.limit is not None:
            query_parts.append("LIMIT ?")
            params.append(options.limit)

        with self._tracer.span(
            "tokenmigration.sqlite_store.read_all",
            {ATTR_POSITION: options.from_position, ATTR_DB_SYSTEM: "sqlite"},
        ):
            async with self._lock:
                cursor = await conn.execute("\n".join(query_parts), params)
                rows = await cursor.fetchall()

        for row in rows:
            yield StoredEvent(
                event=self._deserialize_event(row[2], row[3]),
                stream_position=row[1],
                global_position=row[0],
                stored_at=datetime.fromisoformat(row[4]),
            )

    async def get_global_position(self) -> int:
        conn = self._ensure_connected()
        async with self._lock:
            cursor = await conn.execute("SELECT COALESCE(MAX(global_position), 0) FROM events")
            row = await cursor.fetchone()
        return row[0] if row else 0

    def _deserialize_event(self, event_type: str, payload: str) -> LedgerEvent:
        try:
            event_class = self._event_registry.get(event_type)
            return event_class.model_validate(json.loads(payload))
        except (EventTypeNotFoundError, ValidationError, json.JSONDecodeError) as e:
            raise SerializationError(event_type, str(e)) from e
