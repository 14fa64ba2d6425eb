"""In-memory stores — zero-config, dict-backed storage for development and testing."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from prefs_helper.stores.base import (
    DataStore,
    Editor,
    Listener,
    Listeners,
    Preferences,
    Snapshot,
    Transform,
    check_primitive,
)


class _SnapshotEditor(Editor):
    def __init__(self, owner: InMemoryPreferences) -> None:
        super().__init__()
        self._owner = owner

    def apply(self) -> None:
        self._owner._write(self, blocking=False)

    def commit(self) -> bool:
        return self._owner._write(self, blocking=True)


class InMemoryPreferences(Preferences):
    """Synchronous store held in a dict.  Data is lost on process exit.

    Subclasses that persist somewhere override :meth:`_persist`.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, Any] = {}
        self._generation = 0
        for key, value in (initial or {}).items():
            check_primitive(key, value)
            self._data[key] = value

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._data.get(key)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def all(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._data)

    def edit(self) -> Editor:
        return _SnapshotEditor(self)

    def _write(self, editor: Editor, *, blocking: bool) -> bool:
        with self._lock:
            editor.merge_into(self._data)
            self._generation += 1
            snapshot = dict(self._data)
            generation = self._generation
        return self._persist(snapshot, generation, blocking=blocking)

    def _persist(self, snapshot: dict[str, Any], generation: int, *, blocking: bool) -> bool:
        return True


class InMemoryDataStore(DataStore):
    """Transactional store held in an immutable snapshot that is swapped on commit."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        data = dict(initial or {})
        for key, value in data.items():
            check_primitive(key, value)
        self._snapshot: Snapshot = MappingProxyType(data)
        self._lock = threading.Lock()
        self._listeners = Listeners()

    async def snapshot(self) -> Snapshot:
        return self._snapshot

    async def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            remove = self._listeners.add(listener)
            listener(self._snapshot)
        return remove

    async def edit(self, transform: Transform) -> Snapshot:
        with self._lock:
            draft = dict(self._snapshot)
            transform(draft)
            for key, value in draft.items():
                check_primitive(key, value)
            self._snapshot = MappingProxyType(draft)
            self._listeners.publish(self._snapshot)
            return self._snapshot

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)
