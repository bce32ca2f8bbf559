"""Background activity-log recorder.

Request handlers call :meth:`AuditLog.record`, which only enqueues. A single
``asyncio.Task`` worker drains the bounded queue and writes rows through the
repository in a thread, so audit writes never delay or fail a request.

Supports graceful shutdown: stop accepting, drain what is queued, then
cancel the worker.
"""

from __future__ import annotations

import asyncio
import contextlib

from personal_notes.audit.models import ActivityLog, AuditAction, EntityType
from personal_notes.audit.storage import ActivityLogRepository
from personal_notes.logging import get_logger

log = get_logger("personal_notes.audit.recorder")

# Graceful shutdown: max seconds to wait for queued entries before force-stop.
_DRAIN_TIMEOUT_SECONDS = 5


class AuditLog:
    """Fire-and-forget activity logging over a bounded queue."""

    def __init__(self, repository: ActivityLogRepository, max_queue_size: int = 1000) -> None:
        self._repository = repository
        self._queue: asyncio.Queue[ActivityLog] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: asyncio.Task[None] | None = None
        self._running = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(
        self,
        action: str | AuditAction,
        entity_type: str | EntityType,
        entity_id: str = "",
        description: str = "",
        actor_id: int = 1,
        source_address: str = "",
    ) -> bool:
        """Queue an activity-log entry without waiting for it to be written.

        Returns:
            False if the queue was full and the entry was dropped.
        """
        entry = ActivityLog(
            action=action.value if isinstance(action, AuditAction) else str(action),
            entity_type=(
                entity_type.value if isinstance(entity_type, EntityType) else str(entity_type)
            ),
            entity_id=entity_id or "",
            description=description,
            user_id=actor_id,
            ip_address=source_address or "",
        )
        try:
            self._queue.put_nowait(entry)
        except asyncio.QueueFull:
            log.warning("audit_queue_full", action=entry.action, entity_type=entry.entity_type)
            return False
        return True

    @property
    def pending(self) -> int:
        """Number of entries waiting to be written."""
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return self._running

    async def flush(self) -> None:
        """Wait until every queued entry has been written (or failed)."""
        await self._queue.join()

    async def start(self) -> None:
        """Spawn the writer task."""
        if self._running:
            log.warning("audit_log_already_running")
            return
        self._running = True
        self._worker = asyncio.create_task(self._worker_loop())
        log.info("audit_log_started", max_queue_size=self._queue.maxsize)

    async def stop(self) -> None:
        """Drain queued entries (bounded by a timeout) and stop the worker."""
        if not self._running:
            return

        log.info("audit_log_stopping", pending=self.pending)
        try:
            await asyncio.wait_for(self.flush(), timeout=_DRAIN_TIMEOUT_SECONDS)
        except TimeoutError:
            log.warning("audit_log_drain_timeout", dropped=self.pending)

        self._running = False
        if self._worker and not self._worker.done():
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
        self._worker = None
        log.info("audit_log_stopped")

    # ------------------------------------------------------------------
    # Worker loop
    # ------------------------------------------------------------------

    async def _worker_loop(self) -> None:
        while True:
            try:
                entry = await self._queue.get()
            except asyncio.CancelledError:
                break

            try:
                await asyncio.to_thread(self._repository.create, entry)
            except asyncio.CancelledError:
                self._queue.task_done()
                break
            except Exception:
                log.exception(
                    "audit_write_failed",
                    action=entry.action,
                    entity_type=entry.entity_type,
                )
            self._queue.task_done()
