"""BasePrefs — typed access to a synchronous preference store."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from enum import Enum
from typing import Any, TypeVar

from prefs_helper.exceptions import StoreError
from prefs_helper.keys import (
    Key,
    bool_key,
    date_key,
    enum_key,
    float_key,
    int_key,
    local_date_key,
    local_date_time_key,
    local_time_key,
    long_key,
    string_key,
)
from prefs_helper.stores.base import Editor, Preferences

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


class BasePrefs:
    """Typed accessors over a :class:`~prefs_helper.stores.Preferences` store.

    Reads come straight from the store's in-memory snapshot and never
    block.  Writes are applied to memory at once and persisted in the
    background, unless ``commit=True`` is passed, in which case they are
    persisted before the call returns.

    Writing ``None`` stores the codec's sentinel when it has one (``-1``
    for temporal values, ``""`` for enums) and removes the key otherwise.

    Parameters:
        preferences: The store to wrap.
    """

    def __init__(self, preferences: Preferences) -> None:
        self._preferences = preferences

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    # ── generic ──────────────────────────────────────────────

    def get(self, key: Key[T], default: T | None = None) -> T | None:
        return key.decode(self._preferences.get(key.name), default)

    def set(self, key: Key[T], value: T | None, *, commit: bool = False) -> None:
        raw = key.encode(value)
        editor = self._preferences.edit()
        if raw is None:
            editor.remove(key.name)
        else:
            editor.put(key.name, raw)
        self._finish(editor, "set", commit)

    def remove(self, key: Key[Any] | str, *, commit: bool = False) -> None:
        name = key.name if isinstance(key, Key) else key
        self._finish(self._preferences.edit().remove(name), "remove", commit)

    def contains(self, key: Key[Any] | str) -> bool:
        """Check if a preference for the given key exists, whatever its type."""
        name = key.name if isinstance(key, Key) else key
        return self._preferences.contains(name)

    def clear_all(self) -> None:
        """Remove every preference and persist before returning."""
        self._finish(self._preferences.edit().clear(), "clear_all", commit=True)
        logger.debug("Cleared %s", type(self._preferences).__name__)

    @staticmethod
    def _finish(editor: Editor, operation: str, commit: bool) -> None:
        if not commit:
            editor.apply()
        elif not editor.commit():
            raise StoreError(operation, "commit failed")

    # ── typed accessors ──────────────────────────────────────

    def get_string(self, key: str, default: str = "") -> str:
        return self.get(string_key(key), default)  # type: ignore[return-value]

    def set_string(self, key: str, value: str) -> None:
        self.set(string_key(key), value)

    def get_int(self, key: str, default: int = 0) -> int:
        return self.get(int_key(key), default)  # type: ignore[return-value]

    def set_int(self, key: str, value: int) -> None:
        self.set(int_key(key), value)

    def get_long(self, key: str, default: int = 0) -> int:
        return self.get(long_key(key), default)  # type: ignore[return-value]

    def set_long(self, key: str, value: int) -> None:
        self.set(long_key(key), value)

    def get_float(self, key: str, default: float = 0.0) -> float:
        return self.get(float_key(key), default)  # type: ignore[return-value]

    def set_float(self, key: str, value: float) -> None:
        self.set(float_key(key), value)

    def get_boolean(self, key: str, default: bool = False) -> bool:
        return self.get(bool_key(key), default)  # type: ignore[return-value]

    def set_boolean(self, key: str, value: bool) -> None:
        self.set(bool_key(key), value)

    def get_date(self, key: str, default: datetime | None = None) -> datetime | None:
        return self.get(date_key(key), default)

    def set_date(self, key: str, value: datetime | None) -> None:
        self.set(date_key(key), value)

    def get_local_date_time(self, key: str, default: datetime | None = None) -> datetime | None:
        return self.get(local_date_time_key(key), default)

    def set_local_date_time(self, key: str, value: datetime | None) -> None:
        self.set(local_date_time_key(key), value)

    def get_local_date(self, key: str, default: date | None = None) -> date | None:
        return self.get(local_date_key(key), default)

    def set_local_date(self, key: str, value: date | None) -> None:
        self.set(local_date_key(key), value)

    def get_local_time(self, key: str, default: time | None = None) -> time | None:
        return self.get(local_time_key(key), default)

    def set_local_time(self, key: str, value: time | None) -> None:
        self.set(local_time_key(key), value)

    def get_enum(self, enum_cls: type[E], key: str, default: E | None = None) -> E | None:
        return self.get(enum_key(key, enum_cls), default)

    def set_enum(self, key: str, value: Enum | None) -> None:
        self.set_string(key, "" if value is None else value.name)
