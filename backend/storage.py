"""Snapshot persistence for quiz state.

``SnapshotStore`` reads and writes whole-state JSON blobs by key. Storage is
best effort: database errors are logged and swallowed so the in-memory state
stays playable.

``SnapshotWriter`` sits in front of the store and debounces writes per key.
Each scheduled write cancels the pending one for the same key, and the
snapshot is taken when the write actually runs, so the latest state wins.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.config import settings
from backend.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Versioned key-value blobs in the ``snapshots`` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        data_version: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.data_version = data_version or settings.data_version

    async def get(self, key: str) -> Any | None:
        """Return the decoded blob for ``key``, or None if absent or unusable."""
        try:
            async with self._session_factory() as db:
                row = await db.get(Snapshot, key)
        except SQLAlchemyError:
            logger.exception("Failed to read snapshot %s", key)
            return None

        if row is None:
            return None
        if row.data_version != self.data_version:
            logger.info(
                "Ignoring %s snapshot from data version %s (current %s)",
                key,
                row.data_version,
                self.data_version,
            )
            return None
        try:
            return json.loads(row.payload)
        except json.JSONDecodeError:
            logger.warning("Snapshot %s is not valid JSON; ignoring", key)
            return None

    async def set(self, key: str, value: Any) -> bool:
        """Replace the blob stored under ``key``. Returns False on failure."""
        payload = json.dumps(value, ensure_ascii=False)
        try:
            async with self._session_factory() as db:
                row = await db.get(Snapshot, key)
                if row is None:
                    db.add(Snapshot(key=key, data_version=self.data_version, payload=payload))
                else:
                    row.data_version = self.data_version
                    row.payload = payload
                await db.commit()
        except SQLAlchemyError:
            logger.exception("Failed to write snapshot %s", key)
            return False
        logger.debug("Wrote snapshot %s (%d bytes)", key, len(payload))
        return True

    async def remove(self, *keys: str) -> None:
        if not keys:
            return
        try:
            async with self._session_factory() as db:
                await db.execute(delete(Snapshot).where(Snapshot.key.in_(keys)))
                await db.commit()
        except SQLAlchemyError:
            logger.exception("Failed to remove snapshots %s", ", ".join(keys))


class SnapshotWriter:
    """Debounced write-behind in front of a SnapshotStore."""

    def __init__(self, store: SnapshotStore, delay: float | None = None) -> None:
        self.store = store
        self.delay = settings.persist_debounce_seconds if delay is None else delay
        self._pending: dict[str, Callable[[], Any]] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}  # still waiting out the delay
        self._inflight: set[asyncio.Task[None]] = set()  # writing to the store

    @property
    def pending_keys(self) -> list[str]:
        return list(self._pending)

    def schedule(self, key: str, snapshot: Callable[[], Any]) -> None:
        """Queue a write of ``snapshot()`` for ``key`` after the debounce delay.

        Without a running event loop the write stays pending until ``flush``.
        """
        self._pending[key] = snapshot
        task = self._tasks.pop(key, None)
        if task is not None:
            task.cancel()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; holding %s snapshot until flush", key)
            return
        self._tasks[key] = loop.create_task(self._write_later(key))

    async def _write_later(self, key: str) -> None:
        await asyncio.sleep(self.delay)
        task = asyncio.current_task()
        if self._tasks.get(key) is task:
            del self._tasks[key]
        # A write that has started is never cancelled; flush waits for it instead.
        self._inflight.add(task)  # type: ignore[arg-type]
        try:
            await self._write(key)
        finally:
            self._inflight.discard(task)  # type: ignore[arg-type]

    async def _write(self, key: str) -> None:
        snapshot = self._pending.pop(key, None)
        if snapshot is None:
            return
        await self.store.set(key, snapshot())

    async def _settle_tasks(self) -> None:
        """Cancel writes still in their delay and wait for those already writing."""
        waiting = list(self._tasks.values())
        self._tasks.clear()
        for task in waiting:
            task.cancel()
        await asyncio.gather(*waiting, *self._inflight, return_exceptions=True)

    async def flush(self) -> None:
        """Write every pending snapshot now and wait for writes in progress."""
        await self._settle_tasks()
        for key in list(self._pending):
            await self._write(key)

    async def discard(self) -> None:
        """Drop pending writes without performing them."""
        await self._settle_tasks()
        self._pending.clear()
