"""Sync bridge for verify_sync().

Lets Flask/Django views and scripts call the async pipeline.  Every call
gets its own event loop, so concurrent synchronous verifications share
nothing:

  - No event loop running in this thread: ``asyncio.run()``.
  - Event loop already running (Jupyter, async framework calling sync
    code): ``asyncio.run()`` on a short-lived worker thread, blocking
    until it finishes.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Coroutine, TypeVar

T = TypeVar("T")


def _run_sync(coro: Coroutine[..., ..., T]) -> T:
    """Run *coro* to completion from synchronous code and return its result."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="cswebhook-sync") as pool:
        return pool.submit(asyncio.run, coro).result()
