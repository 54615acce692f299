"""
The editing view for one project's script data.

Owns a CorrelationStore, a ShotNavigator, the script and final documents and
a DebouncedSyncEngine. Remote state is loaded once in open(); after that the
local copy is authoritative for the session and every mutation is pushed
back through the engine. close() is the unmount: it cancels a pending save.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from scriptboard.core.errors import InvalidInputError, NothingToAssembleError, NothingToDoError
from scriptboard.editor import assembler
from scriptboard.editor.document import CorrelatedSpan, Document, RawMarkup
from scriptboard.editor.navigator import ShotNavigator
from scriptboard.editor.notices import LoggingNotifier, Notifier
from scriptboard.editor.store import CorrelationStore
from scriptboard.editor.sync import DebouncedSyncEngine, SnapshotClient
from scriptboard.schemas.script_data import (
    DEFAULT_FINAL_CONTENT,
    DEFAULT_SCRIPT_CONTENT,
    Correlation,
    ScriptData,
    ScriptSnapshot,
    ShotRow,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Who is editing. Used for attribution only."""
    user_id: int
    display_name: str


class ScriptEditorSession:
    def __init__(
        self,
        project_id: int,
        client: SnapshotClient,
        identity: Identity,
        *,
        notifier: Optional[Notifier] = None,
        delay: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ):
        self.project_id = project_id
        self.identity = identity
        self._client = client
        self._notifier = notifier or LoggingNotifier()
        self._sync_options = dict(delay=delay, max_retries=max_retries, retry_backoff=retry_backoff)

        self.store = CorrelationStore([ShotRow(id=1, shot_number=1)])
        self.navigator = ShotNavigator(self.store)
        self.script = Document.from_markup(DEFAULT_SCRIPT_CONTENT)
        self.final = Document.from_markup(DEFAULT_FINAL_CONTENT)

        self.sync: Optional[DebouncedSyncEngine] = None
        self.last_saved: Optional[ScriptData] = None
        self._hydrated = False

    # --- lifecycle ---

    async def open(self) -> "ScriptEditorSession":
        """Load remote state once per mount. Later calls do nothing."""
        if self._hydrated:
            return self

        stored = await asyncio.to_thread(self._client.get_snapshot, self.project_id)
        if stored is not None:
            self._hydrate(stored)

        self.sync = DebouncedSyncEngine(
            self.project_id,
            self._client,
            self.snapshot,
            notifier=self._notifier,
            exists=stored is not None,
            base_version=stored.version if stored is not None else 0,
            on_saved=self._saved,
            **self._sync_options,
        )
        self._hydrated = True
        logger.info(
            "[Editor] project %s opened by %s (%d rows, %d correlations)",
            self.project_id, self.identity.display_name,
            len(self.store), len(self.store.correlations),
        )
        return self

    def _hydrate(self, stored: ScriptSnapshot) -> None:
        self.store = CorrelationStore(stored.spreadsheet_data, stored.correlations)
        self.navigator = ShotNavigator(self.store)
        self.script = Document.from_markup(stored.script_content)
        self.final = Document.from_markup(stored.final_content or DEFAULT_FINAL_CONTENT)

    def _saved(self, stored: ScriptData) -> None:
        self.last_saved = stored

    def close(self) -> None:
        if self.sync is not None:
            self.sync.close()

    async def save(self) -> None:
        """Explicit save button."""
        self._require_open()
        await self.sync.flush()

    # --- snapshot ---

    @property
    def script_content(self) -> str:
        return self.script.render()

    @property
    def final_content(self) -> str:
        return self.final.render()

    def snapshot(self) -> ScriptSnapshot:
        return ScriptSnapshot(
            spreadsheet_data=self.store.rows,
            script_content=self.script_content,
            final_content=self.final_content,
            correlations=self.store.correlations,
        )

    def _require_open(self) -> None:
        if self.sync is None:
            raise RuntimeError("session not opened")

    def _changed(self) -> None:
        self.sync.notify_changed()

    # --- sheet ---

    def add_row(self) -> ShotRow:
        self._require_open()
        row = self.store.add_row()
        self._changed()
        return row

    def update_cell(self, row_id: int, field: str, value: str) -> bool:
        self._require_open()
        updated = self.store.update_cell(row_id, field, value)
        if updated:
            self._changed()
        return updated

    # --- correlations ---

    def add_shot(self) -> Correlation:
        """
        Find the next shot without text, give it a placeholder correlation,
        move the cursor there and append the highlighted span to the script.
        """
        self._require_open()
        try:
            row = self.store.find_next_uncorrelated()
        except NothingToDoError as e:
            self._notifier.info("No Uncorrelated Shots", str(e))
            raise

        corr = self.store.create_correlation_for(row)
        self.navigator.jump_to(self.store.index_of(row.id))
        self.script.append(CorrelatedSpan(corr.text_id, corr.shot_number, corr.text))
        self._changed()
        return corr

    def correlate_selection(self, shot_number: int, text: str) -> Correlation:
        self._require_open()
        try:
            corr = self.store.correlate_selection(shot_number, text)
        except InvalidInputError as e:
            self._notifier.error("No Text Selected", str(e))
            raise

        self.script.append(CorrelatedSpan(corr.text_id, corr.shot_number, corr.text))
        self._changed()
        return corr

    def update_correlation_text(self, text_id: str, text: str) -> bool:
        self._require_open()
        updated = self.store.update_correlation_text(text_id, text)
        if updated:
            self._changed()
        return updated

    def current_correlations(self):
        row = self.navigator.current()
        if row is None:
            return []
        return self.store.correlations_for(row.shot_number)

    def edit_current_shot_text(self, text: str) -> bool:
        self._require_open()
        row = self.navigator.current()
        if row is None:
            return False
        updated = self.store.edit_shot_text(row.shot_number, text)
        if updated:
            self._changed()
        return updated

    # --- documents ---

    def set_script_content(self, markup: str) -> None:
        self._require_open()
        self.script = Document.from_markup(markup)
        self._changed()

    def set_final_content(self, markup: str) -> None:
        self._require_open()
        self.final = Document.from_markup(markup)
        self._changed()

    def send_to_final(self) -> str:
        """Append the current shot, with its details and text, to the final document."""
        self._require_open()
        row = self.navigator.current()
        if row is None:
            raise InvalidInputError("no shot selected")

        block = assembler.render_shot(row, self.store.correlations)
        self.final.append(RawMarkup(block))
        self._changed()
        return block

    def generate_correlated_script(self) -> str:
        self._require_open()
        try:
            doc = assembler.build_script_document(self.store.correlations, self.store.rows)
        except NothingToAssembleError as e:
            self._notifier.info("No Correlations Found", str(e))
            raise

        self.script = doc
        self._changed()
        self._notifier.info("Script Generated", "Correlated script has been generated successfully.")
        return self.script_content

    def generate_final_with_shots(self) -> str:
        self._require_open()
        try:
            doc = assembler.build_final_document(self.store.correlations, self.store.rows)
        except NothingToAssembleError as e:
            self._notifier.info("Missing Data", str(e))
            raise

        self.final = doc
        self._changed()
        self._notifier.info("Final Generated", "Final script with shot details has been generated successfully.")
        return self.final_content
