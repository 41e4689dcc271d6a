"""
Persistence Writer

DESIGN DECISION: Saves are fire-and-forget, but they must not race.
Each storage key gets a single pending slot and at most one write in
flight:
- A new save for a key replaces whatever is waiting in its slot
- The in-flight write finishes, then the newest pending value is written
- So the last-issued save for a key is the one that ends up stored

Synchronous callers may come from several threads (Streamlit runs
each session in its own), so issuing a version and writing it happen
under one lock.

Failures are logged and dropped. Nothing is retried here and the
in-memory state stays the source of truth.
"""

import asyncio
import threading
from typing import Optional

from investment_manager.audit import AuditLogger
from investment_manager.models.audit import AuditEventBuilder
from investment_manager.services.storage import KeyValueStorageInterface


class PersistenceWriter:
    """Serializes writes per key with last-issued-wins semantics."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._version = 0
        self._pending: dict[str, tuple[int, str]] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._committed: dict[str, int] = {}
        self._lock = threading.RLock()

    def schedule(self, key: str, value: str) -> int:
        """
        Queue a value to be written under a key.

        Inside a running event loop the write happens in a background
        task. Without one (plain synchronous callers, e.g. Streamlit
        script threads) it is written before this returns, with the
        lock held so that threads cannot reorder each other's writes.

        Returns:
            The version number assigned to this write
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        with self._lock:
            self._version += 1
            version = self._version
            self._pending[key] = (version, value)

            if loop is None:
                asyncio.run(self._drain(key))
                return version

            task = self._tasks.get(key)
            if task is None or task.done():
                self._tasks[key] = loop.create_task(self._drain(key))
            return version

    async def _drain(self, key: str) -> None:
        while key in self._pending:
            version, value = self._pending.pop(key)
            try:
                await self._storage.set(key, value)
            except Exception as e:
                self._audit_logger.log(
                    AuditEventBuilder.persist_failed(key, version, str(e))
                )
            else:
                self._committed[key] = version
                self._audit_logger.log(
                    AuditEventBuilder.collection_persisted(key, version)
                )

    async def flush(self) -> None:
        """Wait until every scheduled write has been attempted."""
        while True:
            running = [task for task in self._tasks.values() if not task.done()]
            if not running:
                break
            await asyncio.gather(*running)
        # Anything scheduled outside a loop and still pending
        for key in list(self._pending):
            await self._drain(key)

    def committed_version(self, key: str) -> Optional[int]:
        """Version of the last successful write for a key, if any."""
        return self._committed.get(key)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending) or any(
            not task.done() for task in self._tasks.values()
        )
