"""SQLiteDataStore — durable, transactional store backed by aiosqlite."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from types import MappingProxyType
from typing import Any

try:
    import aiosqlite
except ImportError as exc:
    raise ImportError(
        "SQLiteDataStore requires the 'aiosqlite' package. "
        "Install it with: pip install aiosqlite"
    ) from exc

from prefs_helper.exceptions import StoreError
from prefs_helper.stores.base import (
    DataStore,
    Listener,
    Listeners,
    Snapshot,
    Transform,
    check_primitive,
    same_value,
)

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS preferences (
    key   TEXT NOT NULL PRIMARY KEY,
    value TEXT NOT NULL
)
"""


async def _load(db: aiosqlite.Connection) -> dict[str, Any]:
    cursor = await db.execute("SELECT key, value FROM preferences")
    return {key: json.loads(value) for key, value in await cursor.fetchall()}


class SQLiteDataStore(DataStore):
    """Persistent store backed by a single SQLite file.

    The committed state is cached in memory after the first access.  Each
    :meth:`edit` writes only the keys it changed, inside one SQL
    transaction, and the cache is swapped only after that transaction
    commits.  Values are stored as JSON so their primitive type survives.

    The store must be driven from a single event loop.

    Parameters:
        db_path: Path to the SQLite database file.  Use ``":memory:"``
                 for an in-memory database (useful for testing).
    """

    def __init__(self, db_path: str = "preferences.db") -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None
        self._snapshot: Snapshot = MappingProxyType({})
        self._lock = asyncio.Lock()
        self._listeners = Listeners()

    async def _connect(self) -> aiosqlite.Connection:
        if self._db is None:
            try:
                db = await aiosqlite.connect(self._db_path)
                await db.execute(_CREATE_TABLE)
                await db.commit()
                data = await _load(db)
            except aiosqlite.Error as exc:
                raise StoreError("connect", str(exc)) from exc
            self._snapshot = MappingProxyType(data)
            self._db = db
            logger.debug("Opened %s with %d keys", self._db_path, len(data))
        return self._db

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    # ── DataStore protocol ───────────────────────────────────

    async def snapshot(self) -> Snapshot:
        if self._db is None:
            async with self._lock:
                await self._connect()
        return self._snapshot

    async def subscribe(self, listener: Listener) -> Callable[[], None]:
        async with self._lock:
            await self._connect()
            remove = self._listeners.add(listener)
            listener(self._snapshot)
        return remove

    async def edit(self, transform: Transform) -> Snapshot:
        async with self._lock:
            db = await self._connect()
            current = self._snapshot
            draft = dict(current)
            transform(draft)
            for key, value in draft.items():
                check_primitive(key, value)

            removed = [key for key in current if key not in draft]
            changed = [
                (key, json.dumps(value))
                for key, value in draft.items()
                if key not in current or not same_value(current[key], value)
            ]
            if removed or changed:
                try:
                    await db.executemany(
                        "DELETE FROM preferences WHERE key = ?", [(key,) for key in removed]
                    )
                    await db.executemany(
                        "INSERT OR REPLACE INTO preferences (key, value) VALUES (?, ?)", changed
                    )
                    await db.commit()
                except BaseException as exc:
                    await self._recover(db)
                    if isinstance(exc, aiosqlite.Error):
                        raise StoreError("edit", str(exc)) from exc
                    raise

            self._set_snapshot(draft)
            return self._snapshot

    async def _recover(self, db: aiosqlite.Connection) -> None:
        """Roll back an interrupted transaction and resync the cache with the file.

        An edit cancelled while awaiting ``commit`` may still have committed,
        so the cache is reloaded rather than assumed unchanged.
        """
        try:
            await db.rollback()
            committed = await _load(db)
        except aiosqlite.Error:
            logger.warning(
                "Could not recover %s after a failed edit", self._db_path, exc_info=True
            )
            return
        current = self._snapshot
        if committed.keys() != current.keys() or any(
            not same_value(current[key], value) for key, value in committed.items()
        ):
            logger.warning("Interrupted edit reached %s; reloading", self._db_path)
            self._set_snapshot(committed)

    def _set_snapshot(self, data: dict[str, Any]) -> None:
        self._snapshot = MappingProxyType(data)
        self._listeners.publish(self._snapshot)
