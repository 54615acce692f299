import asyncio
import threading

import pytest

from fakes import FakeSnapshotClient, make_record
from scriptboard.core.errors import PersistenceError
from scriptboard.editor.notices import RecordingNotifier
from scriptboard.editor.sync import DebouncedSyncEngine
from scriptboard.schemas.script_data import ScriptSnapshot

DELAY = 0.05


class Counter:
    """Snapshot provider whose content changes on every edit."""

    def __init__(self):
        self.value = 0

    def edit(self, engine):
        self.value += 1
        engine.notify_changed()

    def snapshot(self):
        return ScriptSnapshot(script_content=f"<p>edit {self.value}</p>")


def _engine(client, counter, **kwargs):
    kwargs.setdefault("delay", DELAY)
    kwargs.setdefault("retry_backoff", 0.001)
    return DebouncedSyncEngine(1, client, counter.snapshot, **kwargs)


@pytest.mark.asyncio
async def test_burst_of_edits_is_saved_once_with_last_state():
    client, counter = FakeSnapshotClient(), Counter()
    engine = _engine(client, counter)

    for _ in range(5):
        counter.edit(engine)
        await asyncio.sleep(DELAY / 5)

    assert client.saves == []
    assert engine.pending

    await asyncio.sleep(DELAY * 3)
    await engine.drain()

    assert len(client.saves) == 1
    assert client.saves[0].script_content == "<p>edit 5</p>"
    assert client.saves[0].version == 1
    assert not engine.pending


@pytest.mark.asyncio
async def test_window_restarts_on_every_edit():
    client, counter = FakeSnapshotClient(), Counter()
    engine = _engine(client, counter, delay=0.1)

    counter.edit(engine)
    await asyncio.sleep(0.06)
    counter.edit(engine)
    await asyncio.sleep(0.06)

    # 0.12s after the first edit but only 0.06s after the last one
    assert client.saves == []

    await asyncio.sleep(0.1)
    await engine.drain()
    assert len(client.saves) == 1


@pytest.mark.asyncio
async def test_separate_bursts_save_separately_with_increasing_versions():
    client, counter = FakeSnapshotClient(), Counter()
    engine = _engine(client, counter)

    counter.edit(engine)
    await asyncio.sleep(DELAY * 3)
    await engine.drain()
    counter.edit(engine)
    await asyncio.sleep(DELAY * 3)
    await engine.drain()

    assert [s.version for s in client.saves] == [1, 2]
    assert [m for m, _ in client.calls] == ["create", "save"]
    assert engine.acked_version == 2


@pytest.mark.asyncio
async def test_close_cancels_pending_save():
    client, counter = FakeSnapshotClient(), Counter()
    engine = _engine(client, counter)

    counter.edit(engine)
    engine.close()
    await asyncio.sleep(DELAY * 3)

    assert client.saves == []
    assert not engine.pending

    counter.edit(engine)
    await asyncio.sleep(DELAY * 3)
    assert client.saves == []


@pytest.mark.asyncio
async def test_flush_saves_immediately():
    client, counter = FakeSnapshotClient(), Counter()
    engine = _engine(client, counter, delay=10)

    counter.edit(engine)
    await engine.flush()

    assert len(client.saves) == 1
    assert not engine.pending


@pytest.mark.asyncio
async def test_existing_snapshot_is_updated_from_its_version():
    stored = make_record(1, ScriptSnapshot(version=4))
    client, counter = FakeSnapshotClient(stored=stored), Counter()
    saved = []
    engine = _engine(client, counter, exists=True, base_version=4, on_saved=saved.append)

    counter.edit(engine)
    await engine.flush()

    assert [m for m, _ in client.calls] == ["save"]
    assert client.stored.version == 5
    assert [s.version for s in saved] == [5]


@pytest.mark.asyncio
async def test_create_conflict_falls_back_to_update():
    # someone else created the record after this session loaded
    stored = make_record(1, ScriptSnapshot(version=0))
    client, counter = FakeSnapshotClient(stored=stored), Counter()
    engine = _engine(client, counter, exists=False)

    counter.edit(engine)
    await engine.flush()

    assert [m for m, _ in client.calls] == ["create", "save"]
    assert client.stored.version == 1


@pytest.mark.asyncio
async def test_transient_failures_are_retried():
    client, counter = FakeSnapshotClient(failures=2), Counter()
    notifier = RecordingNotifier()
    engine = _engine(client, counter, max_retries=3, notifier=notifier)

    counter.edit(engine)
    await engine.flush()

    assert len(client.saves) == 3
    assert client.stored is not None
    assert notifier.titles("error") == []


@pytest.mark.asyncio
async def test_terminal_failure_is_reported_and_state_kept():
    client, counter = FakeSnapshotClient(failures=100), Counter()
    notifier = RecordingNotifier()
    engine = _engine(client, counter, max_retries=2, notifier=notifier)

    counter.edit(engine)
    await engine.flush()

    assert len(client.saves) == 3
    assert notifier.titles("error") == ["Error saving script data"]
    assert engine.acked_version == 0
    assert counter.snapshot().script_content == "<p>edit 1</p>"


class GatedClient(FakeSnapshotClient):
    """First save blocks until released, later ones go straight through."""

    def __init__(self, stored):
        super().__init__(stored=stored)
        self.gate = threading.Event()
        self.first_started = threading.Event()
        self._first = True

    def save_snapshot(self, project_id, snapshot):
        if self._first:
            self._first = False
            self.first_started.set()
            self.gate.wait(timeout=5)
        return super().save_snapshot(project_id, snapshot)


@pytest.mark.asyncio
async def test_late_response_for_older_snapshot_is_dropped():
    client = GatedClient(stored=make_record(1, ScriptSnapshot(version=0)))
    counter = Counter()
    notifier = RecordingNotifier()
    saved = []
    engine = _engine(client, counter, exists=True, notifier=notifier, on_saved=saved.append)

    counter.edit(engine)
    await asyncio.sleep(DELAY * 2)
    assert engine.in_flight == 1
    await asyncio.to_thread(client.first_started.wait, 5)

    # v2 goes out while v1 is still in flight
    counter.edit(engine)
    await engine.flush()
    assert engine.acked_version == 2

    client.gate.set()
    await engine.drain()

    assert client.stored.version == 2
    assert client.stored.script_content == "<p>edit 2</p>"
    assert [s.version for s in saved] == [2]
    assert notifier.titles("error") == []


class LostResponseClient(FakeSnapshotClient):
    """Commits the first write, then fails as if the response never arrived."""

    def __init__(self, stored=None):
        super().__init__(stored=stored)
        self.lost = 0

    def _lose_once(self, stored):
        if self.lost == 0:
            self.lost += 1
            raise PersistenceError("read timed out")
        return stored

    def create_snapshot(self, project_id, snapshot):
        return self._lose_once(super().create_snapshot(project_id, snapshot))

    def save_snapshot(self, project_id, snapshot):
        return self._lose_once(super().save_snapshot(project_id, snapshot))


@pytest.mark.asyncio
async def test_committed_update_with_lost_response_is_not_reported():
    client = LostResponseClient(stored=make_record(1, ScriptSnapshot(version=0)))
    counter = Counter()
    notifier = RecordingNotifier()
    engine = _engine(client, counter, exists=True, notifier=notifier)

    counter.edit(engine)
    await engine.flush()

    assert client.stored.version == 1
    assert [s.version for s in client.saves] == [1, 1]
    assert engine.acked_version == 1
    assert notifier.notices == []


@pytest.mark.asyncio
async def test_committed_create_with_lost_response_is_not_reported():
    client, counter = LostResponseClient(), Counter()
    notifier = RecordingNotifier()
    engine = _engine(client, counter, notifier=notifier)

    counter.edit(engine)
    await engine.flush()

    # create committed, retry create hits 409, fallback update is stale
    assert [m for m, _ in client.calls] == ["create", "create", "save"]
    assert engine.acked_version == 1
    assert notifier.notices == []

    counter.edit(engine)
    await engine.flush()
    assert client.stored.version == 2
    assert client.calls[-1][0] == "save"


@pytest.mark.asyncio
async def test_client_errors_are_not_retried():
    # record gone (project deleted): 404 on every update
    client, counter = FakeSnapshotClient(), Counter()
    notifier = RecordingNotifier()
    engine = _engine(client, counter, exists=True, max_retries=3, notifier=notifier)

    counter.edit(engine)
    await engine.flush()

    assert len(client.saves) == 1
    assert notifier.titles("error") == ["Error saving script data"]
    assert engine.acked_version == 0
