"""Schema capability detection (is the optional zone lookup table present?).

The answer is probed once per detector and cached for the life of the
process. Concurrent first callers share a single probe: async callers queue
on an ``anyio.Lock``, sync callers (and the worker thread doing the probe) on a
``threading.Lock``, and both re-check the cache after acquiring.
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache

import anyio
from sqlalchemy import inspect
from sqlalchemy.orm import Session, sessionmaker

from oncoshare.core.async_utils import run_blocking
from oncoshare.core.config import settings
from oncoshare.core.structured_logging import build_log_context
from oncoshare.db.session import SessionLocal

logger = logging.getLogger(__name__)


class CapabilityDetector:
    """Lazily probes for the zone lookup table and memoizes the result."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        table_name: str | None = None,
    ):
        self._session_factory = session_factory
        self._table_name = table_name or settings.ZONE_TABLE_NAME
        self._has_zone_table: bool | None = None
        self._async_lock = anyio.Lock()
        self._sync_lock = threading.Lock()

    @property
    def table_name(self) -> str:
        return self._table_name

    async def has_zone_table(self) -> bool:
        """True if the zone lookup table exists. Probes at most once."""
        cached = self._has_zone_table
        if cached is not None:
            return cached
        async with self._async_lock:
            if self._has_zone_table is None:
                try:
                    await run_blocking(self.has_zone_table_sync)
                except TimeoutError:
                    # The abandoned probe still caches its answer when it finishes.
                    logger.warning(
                        "Zone lookup capability probe timed out table=%s; using fallback path",
                        self._table_name,
                    )
                    return False
        return bool(self._has_zone_table)

    def has_zone_table_sync(self) -> bool:
        """Blocking variant for sync callers (CLI, sync endpoints)."""
        cached = self._has_zone_table
        if cached is not None:
            return cached
        with self._sync_lock:
            if self._has_zone_table is None:
                self._has_zone_table = self._probe()
            return self._has_zone_table

    def _probe(self) -> bool:
        try:
            with self._session_factory() as db:
                present = inspect(db.connection()).has_table(self._table_name)
        except Exception:
            # Capability unknown: degrade to the fallback path, never propagate.
            logger.warning(
                "Zone lookup capability probe failed table=%s; using fallback path",
                self._table_name,
                exc_info=True,
            )
            return False
        logger.info(
            "Zone lookup table %s present=%s",
            self._table_name,
            present,
            extra=build_log_context(table=self._table_name),
        )
        return present


class ResettableCapabilityDetector(CapabilityDetector):
    """
    Detector whose cache can be cleared.

    Call ``reset()`` in tests, or after applying the zone table migration
    to a running process, so the next caller re-probes.
    """

    def reset(self) -> None:
        with self._sync_lock:
            self._has_zone_table = None


@lru_cache
def get_capability_detector() -> ResettableCapabilityDetector:
    """Process-wide detector bound to the application session factory."""
    return ResettableCapabilityDetector(SessionLocal)
