"""Device registry: the authoritative hostname-to-record mapping.

All reads and writes go through a multiple-reader / single-writer lock. An
accepted upsert commits to memory first and returns; the full snapshot is
written to disk afterwards by a single background worker. A crash between
the two loses at most the writes that had not been flushed yet.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Protocol

from iptracker_server.devices.rwlock import ReadWriteLock
from iptracker_server.models import DeviceRecord

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    def load(self) -> dict[str, DeviceRecord]: ...

    def save(self, snapshot: dict[str, DeviceRecord]) -> bool: ...


class DeviceRegistry:
    """Concurrent, durable store of the latest record per reporting host.

    Parameters
    ----------
    store:
        Snapshot backend. When ``None`` the registry is memory-only.
    """

    def __init__(self, store: SnapshotStore | None = None) -> None:
        self._store = store
        self._devices: dict[str, DeviceRecord] = {}
        self._lock = ReadWriteLock()
        self._executor: ThreadPoolExecutor | None = None
        if store is not None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="registry-save",
            )
        self._pending: set[Future[None]] = set()
        self._pending_lock = threading.Lock()
        self._closed = False

    # -------- Reads --------

    def get(self, hostname: str) -> DeviceRecord | None:
        """Return the record for *hostname*, or None if it never reported."""
        with self._lock.read():
            return self._devices.get(hostname)

    def list(self) -> dict[str, DeviceRecord]:
        """Return a copy of the full mapping, safe to iterate while others write."""
        with self._lock.read():
            return dict(self._devices)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._devices)

    def __contains__(self, hostname: object) -> bool:
        with self._lock.read():
            return hostname in self._devices

    # -------- Writes --------

    def upsert(self, hostname: str, record: DeviceRecord) -> None:
        """Insert or replace the record for *hostname*.

        The previous record, if any, is dropped whole. Persistence is
        scheduled after the in-memory write and never reported back here.
        """
        if not hostname:
            raise ValueError("hostname must be non-empty")
        with self._lock.write():
            self._devices[hostname] = record
        self._schedule_save()

    def load_from_store(self) -> int:
        """Replace the in-memory state with the persisted snapshot.

        Returns the number of records loaded.
        """
        if self._store is None:
            return 0
        devices = self._store.load()
        with self._lock.write():
            self._devices = dict(devices)
        logger.info("Loaded %d devices from snapshot", len(devices))
        return len(devices)

    # -------- Persistence --------

    def _schedule_save(self) -> None:
        if self._executor is None:
            return
        if self._closed:
            logger.warning("Registry closed, skipping snapshot write")
            return
        try:
            future = self._executor.submit(self._save_snapshot)
        except RuntimeError:
            logger.warning("Registry closed, skipping snapshot write")
            return
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._on_save_done)

    def _save_snapshot(self) -> None:
        # Snapshot is taken when the save runs, so it reflects every commit
        # made before this point, not just the one that scheduled it.
        snapshot = self.list()
        if self._store is None:
            return
        try:
            saved = self._store.save(snapshot)
        except Exception:
            logger.exception("Snapshot save raised (%d devices)", len(snapshot))
            return
        if not saved:
            logger.error("Snapshot write failed (%d devices)", len(snapshot))

    def _on_save_done(self, future: Future[None]) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def flush(self, timeout: float | None = None) -> bool:
        """Block until every save scheduled so far has finished.

        Returns False if *timeout* expired first.
        """
        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Flush pending saves and stop the background worker."""
        if self._closed:
            return
        self._closed = True
        if self._executor is not None:
            self._executor.shutdown(wait=True)
