"""BaseDataStore — typed access to an asynchronous transactional store."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from typing import Any, Generic, TypeVar

from prefs_helper._internal.dispatcher import Dispatcher
from prefs_helper.keys import Key
from prefs_helper.stores.base import DataStore, Snapshot, Transform, same_value

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

READ_TIMEOUT = 2.0
"""Seconds :meth:`BaseDataStore.read_blocking` waits before giving up."""

_MISSING = object()


class Flow(Generic[T]):
    """Cold stream of values.

    Nothing happens until the flow is iterated.  Each ``async for`` opens
    its own subscription, which lives until the loop exits.
    """

    def __init__(self, source: Callable[[], AsyncIterator[T]]) -> None:
        self._source = source

    def __aiter__(self) -> AsyncIterator[T]:
        return self._source()

    async def first(self) -> T:
        """Return the first value and release the subscription."""
        async with aclosing(self._source()) as items:
            async for item in items:
                return item
        raise RuntimeError("flow ended without emitting a value")

    def map(self, fn: Callable[[T], R]) -> Flow[R]:
        async def mapped() -> AsyncIterator[R]:
            async with aclosing(self._source()) as items:
                async for item in items:
                    yield fn(item)

        return Flow(mapped)


class _Latest:
    """One-slot handoff: a newer snapshot replaces one not yet taken."""

    def __init__(self) -> None:
        self._snapshot: Snapshot | None = None
        self._ready = asyncio.Event()

    def put(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._ready.set()

    async def get(self) -> Snapshot:
        await self._ready.wait()
        self._ready.clear()
        snapshot, self._snapshot = self._snapshot, None
        assert snapshot is not None
        return snapshot


class _Subscription:
    """Unsubscribe handle that may arrive after its consumer has gone."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._remove: Callable[[], None] | None = None
        self._closed = False

    def attach(self, remove: Callable[[], None]) -> None:
        with self._lock:
            if not self._closed:
                self._remove = remove
                return
        remove()

    def close(self) -> None:
        with self._lock:
            self._closed = True
            remove, self._remove = self._remove, None
        if remove is not None:
            remove()


class BaseDataStore:
    """Typed accessors over a :class:`~prefs_helper.stores.DataStore`.

    Subclass it to declare application preferences, or use it directly
    with :mod:`prefs_helper.keys` handles.

    Every store coroutine runs on the adapter's :class:`Dispatcher`, so the
    awaitable methods can be called from any event loop, and the blocking
    ones from any thread other than the dispatcher's own.

    Parameters:
        store:        The transactional store to wrap.
        dispatcher:   Background task queue.  A private one is created (and
                      closed by :meth:`close`) when omitted.
        read_timeout: Seconds :meth:`read_blocking` waits.  Defaults to
                      :data:`READ_TIMEOUT`.
    """

    read_timeout: float = READ_TIMEOUT

    def __init__(
        self,
        store: DataStore,
        *,
        dispatcher: Dispatcher | None = None,
        read_timeout: float | None = None,
    ) -> None:
        self._store = store
        self._owns_dispatcher = dispatcher is None
        self._dispatcher = dispatcher or Dispatcher()
        if read_timeout is not None:
            self.read_timeout = read_timeout

    @property
    def store(self) -> DataStore:
        return self._store

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    # ── reads ────────────────────────────────────────────────

    def read_flow(self, key: Key[T], default: T | None = None) -> Flow[T | None]:
        """Stream *key*'s value: the current one first, then one per change.

        The stream never ends on its own; leave the ``async for`` to cancel
        the subscription.
        """
        return Flow(lambda: self._subscribe(key, default))

    async def _subscribe(self, key: Key[T], default: T | None) -> AsyncIterator[T | None]:
        loop = asyncio.get_running_loop()
        latest = _Latest()
        subscription = _Subscription()

        def listener(snapshot: Snapshot) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(latest.put, snapshot)

        async def register() -> None:
            subscription.attach(await self._store.subscribe(listener))

        try:
            # Registration outlives a cancelled consumer; close() then releases it.
            await asyncio.shield(self._dispatcher.run(register()))
            last: Any = _MISSING
            while True:
                raw = (await latest.get()).get(key.name)
                if last is not _MISSING and same_value(raw, last):
                    continue
                last = raw
                yield key.decode(raw, default)
        finally:
            subscription.close()

    async def read(self, key: Key[T], default: T | None = None) -> T | None:
        """Return *key*'s current value.  Store failures propagate."""
        return await self._dispatcher.run(self._read(key, default))

    def read_blocking(self, key: Key[T], default: T | None = None) -> T | None:
        """Return *key*'s current value, blocking for at most :attr:`read_timeout`.

        A missing key, an undecodable value, a timeout and a store failure
        all produce *default*.  Must not be called from the dispatcher
        thread.
        """
        if self._dispatcher.in_dispatcher_thread():
            raise RuntimeError("read_blocking() cannot run on the dispatcher thread")
        try:
            future = self._dispatcher.submit(self._read(key, default))
        except RuntimeError:
            logger.warning("Could not read %r: dispatcher is closed", key.name)
            return default
        try:
            return future.result(timeout=self.read_timeout)
        except TimeoutError:
            future.cancel()
            logger.warning(
                "Timed out after %ss reading %r, using default", self.read_timeout, key.name
            )
            return default
        except Exception:
            logger.warning("Could not read %r, using default", key.name, exc_info=True)
            return default

    async def _read(self, key: Key[T], default: T | None) -> T | None:
        snapshot = await self._store.snapshot()
        return key.decode(snapshot.get(key.name), default)

    async def contains(self, key: Key[Any] | str) -> bool:
        name = key.name if isinstance(key, Key) else key
        snapshot = await self._dispatcher.run(self._store.snapshot())
        return name in snapshot

    # ── writes ───────────────────────────────────────────────

    @staticmethod
    def _update(key: Key[T], value: T | None) -> Transform:
        raw = None if value is None else key.encode(value)

        def transform(prefs: Any) -> None:
            if raw is None:
                prefs.pop(key.name, None)
            else:
                prefs[key.name] = raw

        return transform

    async def write(self, key: Key[T], value: T | None) -> None:
        """Store *value* under *key*, or remove the key when *value* is ``None``.

        Returns once the transaction has committed.  Store failures
        propagate.
        """
        await self._dispatcher.run(self._store.edit(self._update(key, value)))

    def write_async(self, key: Key[T], value: T | None) -> None:
        """Queue the same transaction as :meth:`write` and return immediately.

        Queued writes commit in the order they were made.  Failures are
        logged and dropped.
        """
        transform = self._update(key, value)
        self._dispatcher.launch(lambda: self._store.edit(transform))

    async def remove(self, key: Key[Any]) -> None:
        await self.write(key, None)

    async def clear_all(self) -> None:
        """Remove every key.  Returns once the transaction has committed."""
        await self._dispatcher.run(self._store.edit(lambda prefs: prefs.clear()))
        logger.debug("Cleared %s", type(self._store).__name__)

    # ── lifecycle ────────────────────────────────────────────

    def drain(self, timeout: float | None = None) -> None:
        """Block until every :meth:`write_async` call so far has been applied."""
        self._dispatcher.join(timeout)

    def close(self) -> None:
        """Flush queued writes, close the store, and stop a private dispatcher."""
        if self._dispatcher.closed:
            return
        self._dispatcher.join()
        self._dispatcher.submit(self._store.close()).result()
        if self._owns_dispatcher:
            self._dispatcher.close()

    def __enter__(self) -> BaseDataStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
