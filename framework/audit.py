"""
Best-effort audit side channel.

Handlers call AuditRecorder.record() after an operation succeeded. The entry is put
on a bounded in-memory queue and written by a background task; record() never
blocks and never raises. A full queue drops the entry, a failing writer loses it.
Both cases are logged and neither reaches the caller.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional
from framework.logging.logger import get_logger

logger = get_logger("audit")


@dataclass(frozen=True)
class AuditEntry:
    action: str
    tenant_id: Optional[str] = None
    user_id: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


AuditWriter = Callable[[AuditEntry], Awaitable[None]]


class AuditRecorder:
    """Bounded queue drained by one background task."""

    def __init__(self, writer: AuditWriter, maxsize: int = 1000):
        self._writer = writer
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._worker: Optional[asyncio.Task] = None
        self.dropped = 0
        self.failed = 0

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def record(self, entry: AuditEntry) -> bool:
        """Enqueue entry; False when it was dropped."""
        try:
            self._queue.put_nowait(entry)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Audit queue full, dropping {entry.action} for entity {entry.entity_id}")
            return False

    def start(self) -> None:
        if self.running:
            return
        self._worker = asyncio.create_task(self._drain(), name="audit-recorder")
        logger.info("Audit recorder started")

    async def stop(self, timeout: float = 5.0) -> None:
        """Flush what is queued (bounded by timeout), then cancel the worker."""
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Audit recorder stopped with {self._queue.qsize()} entries unwritten")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info("Audit recorder stopped")

    async def flush(self) -> None:
        """Wait until every queued entry has been handled."""
        await self._queue.join()

    async def _drain(self) -> None:
        while True:
            entry = await self._queue.get()
            try:
                await self._writer(entry)
            except Exception as e:
                self.failed += 1
                logger.opt(exception=True).warning(f"Audit write failed for {entry.action}: {e}")
            finally:
                self._queue.task_done()
