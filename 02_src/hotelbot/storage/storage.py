"""SQLite storage implementation."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import aiosqlite

from ..config import resolve_db_path
from ..errors import StorageError
from ..models import Session, TraceEvent

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class IStorage(Protocol):
    """Persistent storage for sessions and trace events (SQLite)."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    # Sessions
    async def get_session(self, address: str) -> Session | None:
        """Load the session of a conversation address."""
        ...

    async def save_session(self, session: Session) -> None:
        """Save a session, replacing any previous state for its address."""
        ...

    # TraceEvents
    async def save_trace_event(self, event: TraceEvent) -> None:
        """Save a trace event."""
        ...

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters, newest first."""
        ...

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        ...


def _utc_iso(value: datetime) -> str:
    # Stored as UTC ISO strings so lexical order is time order
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _event_from_row(row) -> TraceEvent:
    event_id, event_type, actor, data, timestamp = row
    return TraceEvent(
        id=event_id,
        event_type=event_type,
        actor=actor,
        data=json.loads(data),
        timestamp=datetime.fromisoformat(timestamp).replace(tzinfo=timezone.utc),
    )


class Storage:
    """SQLite storage implementation.

    Sessions are one JSON document per address; the last save wins.
    """

    def __init__(self, db_path: str | Path | None = None):
        self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def _db(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Storage not initialized")
        return self._conn

    async def init(self) -> None:
        """Initialize database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)
        await self._conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    # Sessions
    async def get_session(self, address: str) -> Session | None:
        db = self._db
        try:
            async with db.execute(
                "SELECT state FROM sessions WHERE address = ?", (address,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to load session {address}: {e}") from e

        if row is None:
            return None

        try:
            return Session.from_dict(json.loads(row[0]))
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Corrupted session {address}: {e}") from e

    async def save_session(self, session: Session) -> None:
        db = self._db
        session.updated_at = datetime.now(timezone.utc)
        try:
            state = json.dumps(session.to_dict())
        except (TypeError, ValueError) as e:
            raise StorageError(f"Session {session.address} is not serializable: {e}") from e

        try:
            await db.execute(
                """
                INSERT OR REPLACE INTO sessions (address, state, updated_at)
                VALUES (?, ?, ?)
                """,
                (session.address, state, _utc_iso(session.updated_at)),
            )
            await db.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to save session {session.address}: {e}") from e

    # TraceEvents
    async def save_trace_event(self, event: TraceEvent) -> None:
        db = self._db
        await db.execute(
            """
            INSERT INTO trace_events (id, event_type, actor, data, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                event.id or str(uuid.uuid4()),
                event.event_type,
                event.actor,
                json.dumps(event.data, default=str),
                _utc_iso(event.timestamp),
            ),
        )
        await db.commit()

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        db = self._db
        filters: list[tuple[str, list]] = []
        if after:
            filters.append(("timestamp > ?", [_utc_iso(after)]))
        if event_types:
            placeholders = ",".join("?" * len(event_types))
            filters.append((f"event_type IN ({placeholders})", list(event_types)))
        if actor:
            filters.append(("actor = ?", [actor]))

        where = " AND ".join(clause for clause, _ in filters)
        params = [value for _, values in filters for value in values]

        query = "SELECT id, event_type, actor, data, timestamp FROM trace_events"
        if where:
            query += f" WHERE {where}"
        query += " ORDER BY timestamp DESC LIMIT ?"

        async with db.execute(query, [*params, limit]) as cursor:
            rows = await cursor.fetchall()
        return [_event_from_row(row) for row in rows]

    # Lifecycle
    async def clear(self) -> None:
        db = self._db
        for table in ("sessions", "trace_events"):
            await db.execute(f"DELETE FROM {table}")
        await db.commit()
