"""Store protocols — the primitive key-value stores the adapters sit on.

Two shapes are supported:

* :class:`Preferences` — a synchronous store with a resident snapshot.
  Reads never block; writes go through an :class:`Editor`.
* :class:`DataStore` — an asynchronous transactional store.  Reads are
  subscriptions, writes are serialized transactions.

Values are always primitives: ``str``, ``int``, ``float`` or ``bool``.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any

logger = logging.getLogger(__name__)

Snapshot = Mapping[str, Any]
Listener = Callable[[Snapshot], None]
Transform = Callable[[MutableMapping[str, Any]], None]

PRIMITIVE_TYPES: tuple[type, ...] = (str, int, float, bool)


def check_primitive(key: str, value: Any) -> None:
    """Reject values a store cannot hold."""
    if not isinstance(value, PRIMITIVE_TYPES):
        raise TypeError(
            f"Cannot store {type(value).__name__} under {key!r}; "
            "encode it to str, int, float or bool first"
        )


def same_value(a: Any, b: Any) -> bool:
    """Strict equality for stored primitives: ``1``, ``1.0`` and ``True`` differ.

    NaN equals NaN, so a stored NaN does not count as a change.
    """
    if type(a) is not type(b):
        return False
    return a == b or (isinstance(a, float) and a != a and b != b)


class Listeners:
    """Thread-safe set of snapshot listeners."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []

    def add(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def publish(self, snapshot: Snapshot) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener %r failed", listener)

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)


class Editor(ABC):
    """Buffered set of changes against a :class:`Preferences` store.

    Changes are invisible until :meth:`apply` or :meth:`commit`.  A
    :meth:`clear` in the same edit runs before any put or remove.
    """

    def __init__(self) -> None:
        self._puts: dict[str, Any] = {}
        self._removals: set[str] = set()
        self._clear = False

    def put(self, key: str, value: Any) -> Editor:
        check_primitive(key, value)
        self._removals.discard(key)
        self._puts[key] = value
        return self

    def remove(self, key: str) -> Editor:
        self._puts.pop(key, None)
        self._removals.add(key)
        return self

    def clear(self) -> Editor:
        self._clear = True
        return self

    def merge_into(self, data: MutableMapping[str, Any]) -> None:
        """Apply the buffered changes to *data* in place."""
        if self._clear:
            data.clear()
        for key in self._removals:
            data.pop(key, None)
        data.update(self._puts)

    @abstractmethod
    def apply(self) -> None:
        """Update the in-memory snapshot now and persist in the background."""
        ...

    @abstractmethod
    def commit(self) -> bool:
        """Update and persist synchronously.  Returns ``True`` on success."""
        ...


class Preferences(ABC):
    """Abstract base for synchronous flat stores."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the raw value, or ``None`` if not found."""
        ...

    @abstractmethod
    def contains(self, key: str) -> bool:
        """Return ``True`` if the key exists."""
        ...

    @abstractmethod
    def all(self) -> dict[str, Any]:
        """Return a copy of every stored entry."""
        ...

    @abstractmethod
    def edit(self) -> Editor:
        """Start a new batch of changes."""
        ...


class DataStore(ABC):
    """Abstract base for asynchronous transactional stores.

    Implementations guarantee that :meth:`edit` transactions are applied
    one at a time, atomically, and that every listener sees committed
    snapshots in commit order.
    """

    @abstractmethod
    async def snapshot(self) -> Snapshot:
        """Return the current committed state."""
        ...

    @abstractmethod
    async def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* and return a function that unregisters it.

        The listener is called with the current snapshot right away and
        again after every committed transaction.  Listeners must not block.
        The returned function may be called from any thread.
        """
        ...

    @abstractmethod
    async def edit(self, transform: Transform) -> Snapshot:
        """Run *transform* against a private copy and commit it.

        If *transform* raises, nothing is committed and the error
        propagates.  Returns the committed snapshot.
        """
        ...

    async def close(self) -> None:  # noqa: B027
        """Release any resources held by the store."""
