"""Bridge from synchronous CLI code into the async journal commands."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

T = TypeVar("T")


def run_async_safely(coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
    """Run ``coro`` to completion and return its result.

    Click commands call this.  With no loop running in the current thread
    the coroutine gets its own ``asyncio.run``; when a loop is already
    running (a command invoked from async code or a notebook) it runs on a
    fresh loop in a worker thread instead, so the caller's loop is never
    re-entered.

    Args:
        coro: The coroutine to run.
        timeout: Seconds to wait for the worker thread; only applies when a
            loop was already running.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="daybook-async") as pool:
        return pool.submit(asyncio.run, coro).result(timeout=timeout)
