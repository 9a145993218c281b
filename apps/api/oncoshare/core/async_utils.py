from __future__ import annotations

from functools import partial
from typing import Callable, TypeVar

import anyio

from oncoshare.core.config import settings

T = TypeVar("T")

_DEFAULT_TIMEOUT = object()


async def run_blocking(
    func: Callable[..., T],
    *args: object,
    timeout: float | None | object = _DEFAULT_TIMEOUT,
) -> T:
    """
    Run a blocking database call in a worker thread so the event loop stays free.

    - Uses settings.query_timeout as the deadline unless ``timeout`` is given.
    - ``timeout=None`` runs without a deadline.
    - On deadline the caller gets TimeoutError; the worker thread is abandoned.
    """
    if timeout is _DEFAULT_TIMEOUT:
        timeout = settings.query_timeout

    call = partial(func, *args)
    if timeout is None:
        return await anyio.to_thread.run_sync(call)
    with anyio.fail_after(timeout):
        return await anyio.to_thread.run_sync(call, abandon_on_cancel=True)
