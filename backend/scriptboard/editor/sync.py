"""
Debounced autosave.

Every local edit calls notify_changed(). The engine keeps one pending timer;
each call cancels it and starts a new one, so a burst of edits ends in a
single write once the editor has been quiet for `delay` seconds. The write
always carries the full snapshot at fire time, stamped with the next
sequence number.

Writes are fire-and-forget: a new snapshot does not wait for the previous
request to finish. The server rejects versions older than what it holds, and
responses for snapshots older than the newest acknowledged one are dropped
here, so the last snapshot wins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol, Set

from scriptboard.core.config import settings
from scriptboard.core.errors import PersistenceError, StaleSnapshotError
from scriptboard.editor.notices import LoggingNotifier, Notifier
from scriptboard.schemas.script_data import ScriptData, ScriptSnapshot

logger = logging.getLogger(__name__)


class SnapshotClient(Protocol):
    def get_snapshot(self, project_id: int) -> Optional[ScriptData]: ...

    def create_snapshot(self, project_id: int, snapshot: ScriptSnapshot) -> ScriptData: ...

    def save_snapshot(self, project_id: int, snapshot: ScriptSnapshot) -> ScriptData: ...


class DebouncedSyncEngine:
    def __init__(
        self,
        project_id: int,
        client: SnapshotClient,
        snapshot_provider: Callable[[], ScriptSnapshot],
        *,
        delay: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        notifier: Optional[Notifier] = None,
        exists: bool = False,
        base_version: int = 0,
        on_saved: Optional[Callable[[ScriptData], None]] = None,
    ):
        self.project_id = project_id
        self._client = client
        self._snapshot_provider = snapshot_provider
        self.delay = settings.SAVE_DEBOUNCE_SECONDS if delay is None else delay
        self.max_retries = settings.SAVE_MAX_RETRIES if max_retries is None else max_retries
        self.retry_backoff = (
            settings.SAVE_RETRY_BACKOFF_SECONDS if retry_backoff is None else retry_backoff
        )
        self._notifier = notifier or LoggingNotifier()
        self._on_saved = on_saved

        self._exists = exists
        self._sequence = base_version
        self._acked_version = base_version

        self._handle: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    # --- state ---

    @property
    def pending(self) -> bool:
        """A save is scheduled but has not fired yet."""
        return self._handle is not None

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    @property
    def acked_version(self) -> int:
        return self._acked_version

    @property
    def closed(self) -> bool:
        return self._closed

    # --- scheduling ---

    def notify_changed(self) -> None:
        if self._closed:
            logger.debug("[Sync] project %s: change after close ignored", self.project_id)
            return

        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self._handle = loop.call_later(self.delay, self._fire)

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> asyncio.Task:
        self._handle = None
        self._sequence += 1
        snapshot = self._snapshot_provider().model_copy(update={"version": self._sequence})

        task = asyncio.get_running_loop().create_task(self._persist(snapshot))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def flush(self) -> None:
        """Save now instead of waiting for the idle window."""
        if self._closed:
            return
        self._cancel_timer()
        await self._fire()

    async def drain(self) -> None:
        """Wait for every request already sent."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Teardown: the pending save never fires. Requests already sent are left alone."""
        self._cancel_timer()
        self._closed = True

    # --- persistence ---

    def _send(self, snapshot: ScriptSnapshot) -> ScriptData:
        if not self._exists:
            try:
                stored = self._client.create_snapshot(self.project_id, snapshot)
            except StaleSnapshotError:
                raise
            except PersistenceError as e:
                if e.status_code != 409:
                    raise
                # someone created it first; fall through to a normal update
                self._exists = True
                return self._client.save_snapshot(self.project_id, snapshot)
            self._exists = True
            return stored

        return self._client.save_snapshot(self.project_id, snapshot)

    @staticmethod
    def _retryable(e: PersistenceError) -> bool:
        # transport failures carry no status; 4xx answers will not change on retry
        return e.status_code is None or e.status_code >= 500

    async def _persist(self, snapshot: ScriptSnapshot) -> None:
        attempt = 0

        while True:
            try:
                stored = await asyncio.to_thread(self._send, snapshot)
            except StaleSnapshotError as e:
                if snapshot.version <= self._acked_version:
                    logger.debug(
                        "[Sync] project %s: v%s superseded by v%s",
                        self.project_id, snapshot.version, self._acked_version,
                    )
                    return
                if attempt > 0 and e.stored_version is not None and e.stored_version >= snapshot.version:
                    # an earlier attempt was committed but its response was lost
                    logger.info(
                        "[Sync] project %s: v%s already stored (server at v%s)",
                        self.project_id, snapshot.version, e.stored_version,
                    )
                    self._acked_version = snapshot.version
                    return
                logger.warning("[Sync] project %s: v%s rejected as stale: %s", self.project_id, snapshot.version, e)
                self._notifier.error("Error saving script data", str(e))
                return
            except PersistenceError as e:
                attempt += 1
                if not self._retryable(e) or attempt > self.max_retries:
                    logger.error(
                        "[Sync] project %s: giving up on v%s after %d attempts: %s",
                        self.project_id, snapshot.version, attempt, e,
                    )
                    self._notifier.error("Error saving script data", str(e))
                    return

                wait = self.retry_backoff * (2 ** (attempt - 1))
                logger.warning(
                    "[Sync] project %s: save of v%s failed (%s), retry %d/%d in %.2fs",
                    self.project_id, snapshot.version, e, attempt, self.max_retries, wait,
                )
                await asyncio.sleep(wait)
                continue

            self._acknowledge(snapshot, stored)
            return

    def _acknowledge(self, snapshot: ScriptSnapshot, stored: ScriptData) -> None:
        if snapshot.version <= self._acked_version:
            logger.debug("[Sync] project %s: late response for v%s dropped", self.project_id, snapshot.version)
            return

        self._acked_version = snapshot.version
        logger.debug("[Sync] project %s: saved v%s", self.project_id, snapshot.version)

        if self._on_saved is not None:
            self._on_saved(stored)
