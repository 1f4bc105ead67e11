"""Single-flight cell: at most one attempt runs, every caller shares its outcome.

The cell holds an optional `concurrent.futures.Future` behind a
`threading.Lock`. The first caller installs the future under the lock and
starts the work on a worker thread owned by the cell, with its own event
loop; callers arriving while it is installed wait on the same future. No
caller's event loop or cancellation reaches the attempt. The reference is
cleared before the outcome is published.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Awaitable, Callable, Generic, TypeVar

from bundle_provision.core.types import ProvisioningState

T = TypeVar("T")


class SingleFlight(Generic[T]):
    def __init__(self, *, name: str = "single-flight") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._inflight: concurrent.futures.Future[T] | None = None
        self._state = ProvisioningState.NOT_STARTED
        self._attempts = 0

    @property
    def state(self) -> ProvisioningState:
        with self._lock:
            return self._state

    @property
    def attempts(self) -> int:
        """Number of attempts started over the cell's lifetime."""

        with self._lock:
            return self._attempts

    def _claim(self, work: Callable[[], Awaitable[T]]) -> concurrent.futures.Future[T]:
        with self._lock:
            if self._inflight is not None:
                return self._inflight
            fut: concurrent.futures.Future[T] = concurrent.futures.Future()
            self._inflight = fut
            self._state = ProvisioningState.IN_FLIGHT
            self._attempts += 1
            number = self._attempts

        worker = threading.Thread(
            target=self._worker,
            args=(fut, work),
            name=f"{self._name}-{number}",
        )
        try:
            worker.start()
        except RuntimeError as exc:
            self._release(fut)
            fut.set_exception(exc)
        return fut

    def _release(self, fut: concurrent.futures.Future[T]) -> None:
        with self._lock:
            if self._inflight is fut:
                self._inflight = None
                self._state = ProvisioningState.IDLE

    def _worker(self, fut: concurrent.futures.Future[T], work: Callable[[], Awaitable[T]]) -> None:
        try:
            result = asyncio.run(self._call(work))
        except BaseException as exc:  # noqa: BLE001
            self._release(fut)
            if isinstance(exc, Exception):
                fut.set_exception(exc)
            else:
                fut.cancel()
            return
        self._release(fut)
        fut.set_result(result)

    @staticmethod
    async def _call(work: Callable[[], Awaitable[T]]) -> T:
        return await work()

    async def run(self, work: Callable[[], Awaitable[T]]) -> T:
        """Join the in-flight attempt, or start one running `work`.

        Cancelling the awaiting caller (or closing its event loop) leaves the
        attempt running for everyone else.
        """

        fut = self._claim(work)
        return await asyncio.shield(asyncio.wrap_future(fut))

    def run_blocking(self, work: Callable[[], Awaitable[T]]) -> T:
        """Thread entry point; must not be called from a running event loop."""

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError("run_blocking() called from a running event loop; await run() instead")

        return self._claim(work).result()
