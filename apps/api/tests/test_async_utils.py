import threading
import time

import anyio
import pytest

from oncoshare.core.async_utils import run_blocking


@pytest.mark.anyio
async def test_run_blocking_runs_off_the_event_loop_thread() -> None:
    loop_thread = threading.get_ident()

    worker_thread = await run_blocking(threading.get_ident)

    assert worker_thread != loop_thread


@pytest.mark.anyio
async def test_run_blocking_passes_positional_args() -> None:
    assert await run_blocking(divmod, 17, 5) == (3, 2)


@pytest.mark.anyio
async def test_run_blocking_raises_timeout_error_on_deadline() -> None:
    release = threading.Event()

    def _slow() -> str:
        release.wait(5)
        return "late"

    try:
        with pytest.raises(TimeoutError):
            await run_blocking(_slow, timeout=0.05)
    finally:
        release.set()


@pytest.mark.anyio
async def test_run_blocking_without_deadline(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("oncoshare.core.config.settings.QUERY_TIMEOUT_SECONDS", 0.01)

    def _slower_than_default() -> str:
        time.sleep(0.05)
        return "done"

    assert await run_blocking(_slower_than_default, timeout=None) == "done"


@pytest.mark.anyio
async def test_run_blocking_propagates_worker_errors() -> None:
    def _broken() -> None:
        raise LookupError("missing")

    with pytest.raises(LookupError):
        await run_blocking(_broken)

    # The event loop is still usable afterwards.
    await anyio.sleep(0)
