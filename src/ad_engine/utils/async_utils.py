"""Bridge from synchronous entry points (Celery tasks, CLI) into asyncio."""

import asyncio
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")

_local = threading.local()


def _thread_loop() -> asyncio.AbstractEventLoop:
    loop: asyncio.AbstractEventLoop | None = getattr(_local, "loop", None)
    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        _local.loop = loop
    return loop


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` on this thread's long-lived event loop.

    Each worker thread keeps one loop open across tasks. Provider clients that
    cache loop-bound connections (httpx, google-genai) break if the loop they
    first ran on is closed underneath them.

    Raises:
        RuntimeError: If called from inside a running event loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        coro.close()
        raise RuntimeError("run_async cannot be called from a running event loop")

    loop = _thread_loop()
    asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)
