"""Background task queue — an event loop running on its own thread."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable, Coroutine
from concurrent.futures import Future
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Job = Callable[[], Awaitable[Any]]


class Dispatcher:
    """Runs store coroutines on a private event loop thread.

    Every coroutine that touches a store goes through one dispatcher, so a
    store only ever sees a single event loop no matter which thread or loop
    the caller lives on.

    * :meth:`submit` schedules a coroutine and returns a
      :class:`concurrent.futures.Future` (for blocking callers).
    * :meth:`run` awaits a coroutine from any other event loop.
    * :meth:`launch` queues a fire-and-forget job.  Jobs run one at a time
      in the order they were launched; their results are discarded and
      their failures are logged, never reported to the caller.

    Parameters:
        name: Name of the loop thread.
    """

    def __init__(self, name: str = "prefs-dispatcher") -> None:
        self._loop = asyncio.new_event_loop()
        self._jobs: asyncio.Queue[Job] = asyncio.Queue()
        self._closed = False
        self._ready = threading.Event()
        self._thread = threading.Thread(target=self._run_loop, name=name, daemon=True)
        self._thread.start()
        self._ready.wait()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.create_task(self._drain())
        self._loop.call_soon(self._ready.set)
        try:
            self._loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._loop.run_until_complete(self._loop.shutdown_asyncgens())
            self._loop.close()

    async def _drain(self) -> None:
        while True:
            job = await self._jobs.get()
            try:
                await job()
            except Exception:
                logger.warning("Background job %r failed", job, exc_info=True)
            finally:
                self._jobs.task_done()

    # ── scheduling ───────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    def in_dispatcher_thread(self) -> bool:
        return threading.current_thread() is self._thread

    def submit(self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        if self._closed:
            coro.close()
            raise RuntimeError("Dispatcher is closed")
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    async def run(self, coro: Coroutine[Any, Any, T]) -> T:
        return await asyncio.wrap_future(self.submit(coro))

    def launch(self, job: Job) -> None:
        if self._closed:
            raise RuntimeError("Dispatcher is closed")
        self._loop.call_soon_threadsafe(self._jobs.put_nowait, job)

    def join(self, timeout: float | None = None) -> None:
        """Block until every launched job has finished."""
        self.submit(self._jobs.join()).result(timeout)

    # ── lifecycle ────────────────────────────────────────────

    def close(self, wait: bool = True) -> None:
        """Stop the loop thread.  With *wait*, launched jobs finish first."""
        if self._closed:
            return
        if wait and not self.in_dispatcher_thread():
            self.join()
        self._closed = True
        self._loop.call_soon_threadsafe(self._loop.stop)
        if not self.in_dispatcher_thread():
            self._thread.join()

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
