"""Running blocking client calls off the caller's thread.

The client only offers a synchronous contract. This module holds the
concurrency wrappers a caller may pick: a thread-pool runner that hands
results to a callback, a deadline-bounded call, and an asyncio offload.
None of them depends on a UI toolkit.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, TypeVar

from core.domain.models import ApiFailure, ApiResult, ErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackgroundRunner:
    """Thread-pool dispatch with an optional completion callback.

    `on_done` runs on the worker thread; a UI layer that needs its own
    thread re-dispatches from there.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="registry")

    def submit(
        self,
        fn: Callable[..., T],
        *args: Any,
        on_done: Callable[[T], None] | None = None,
        **kwargs: Any,
    ) -> Future[T]:
        future = self._executor.submit(fn, *args, **kwargs)
        if on_done is not None:
            future.add_done_callback(lambda f: _deliver(f, on_done))
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundRunner":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.shutdown()


def _deliver(future: Future[T], on_done: Callable[[T], None]) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        # The future keeps the exception for whoever calls result().
        logger.error("background call raised %r; callback skipped", exc)
        return
    on_done(future.result())


def call_with_deadline(
    fn: Callable[..., ApiResult],
    *args: Any,
    timeout: float,
    runner: BackgroundRunner | None = None,
    **kwargs: Any,
) -> ApiResult:
    """Wait at most `timeout` seconds for a client call.

    The underlying request is not cancelled; it finishes on its worker and
    its result is dropped.
    """

    own_runner = runner is None
    active = runner or BackgroundRunner(max_workers=1)
    try:
        future = active.submit(fn, *args, **kwargs)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            logger.warning("call did not finish within %.2fs", timeout)
            return ApiFailure(kind=ErrorKind.TRANSPORT, message=f"timed out after {timeout:g}s")
    finally:
        if own_runner:
            active.shutdown(wait=False)


async def run_in_thread(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Await a blocking client call from async code."""

    return await asyncio.to_thread(fn, *args, **kwargs)
