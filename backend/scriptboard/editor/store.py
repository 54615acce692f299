from __future__ import annotations

import itertools
import logging
import time
from typing import Iterable, List, Optional, Set

from pydantic.alias_generators import to_camel

from scriptboard.core.errors import InvalidInputError, NoUncorrelatedShotError
from scriptboard.schemas.script_data import Correlation, ShotRow

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Enter your text for this shot here..."

EDITABLE_FIELDS = ("scene_label", "slug", "on_screen", "cam_op", "location")
_FIELD_NAMES = {name: name for name in EDITABLE_FIELDS}
_FIELD_NAMES.update({to_camel(name): name for name in EDITABLE_FIELDS})

_text_counter = itertools.count(1)


def new_text_id() -> str:
    """Time-based id with a process-wide counter so two calls in one millisecond differ."""
    return f"text-{int(time.time() * 1000)}-{next(_text_counter)}"


class CorrelationStore:
    """
    Shot rows and the script text correlated with them, for one project.

    hasCorrelation is never stored: every row handed out is a copy with the
    flag computed from the current correlation set.
    """

    def __init__(
        self,
        rows: Optional[Iterable[ShotRow]] = None,
        correlations: Optional[Iterable[Correlation]] = None,
    ):
        self._rows: List[ShotRow] = [r.model_copy() for r in rows or []]
        self._correlations: List[Correlation] = [c.model_copy() for c in correlations or []]

    # --- reads ---

    def _correlated_shots(self) -> Set[int]:
        return {c.shot_number for c in self._correlations}

    def _view(self, row: ShotRow, correlated: Set[int]) -> ShotRow:
        return row.model_copy(update={"has_correlation": row.shot_number in correlated})

    @property
    def rows(self) -> List[ShotRow]:
        correlated = self._correlated_shots()
        return [self._view(r, correlated) for r in self._rows]

    @property
    def correlations(self) -> List[Correlation]:
        return [c.model_copy() for c in self._correlations]

    def __len__(self) -> int:
        return len(self._rows)

    def has_correlation(self, row: ShotRow) -> bool:
        return any(c.shot_number == row.shot_number for c in self._correlations)

    def get_row(self, row_id: int) -> Optional[ShotRow]:
        for row in self._rows:
            if row.id == row_id:
                return self._view(row, self._correlated_shots())
        return None

    def row_at(self, index: int) -> ShotRow:
        return self._view(self._rows[index], self._correlated_shots())

    def index_of(self, row_id: int) -> int:
        for i, row in enumerate(self._rows):
            if row.id == row_id:
                return i
        raise InvalidInputError(f"row {row_id} not found")

    def correlations_for(self, shot_number: int) -> List[Correlation]:
        return [c.model_copy() for c in self._correlations if c.shot_number == shot_number]

    # --- row mutations ---

    def add_row(self) -> ShotRow:
        n = len(self._rows) + 1
        row = ShotRow(id=n, shot_number=n)
        self._rows.append(row)
        return row.model_copy()

    def update_cell(self, row_id: int, field: str, value: str) -> bool:
        """
        Replace one editable field of one row. Returns False when the id is
        absent. Content is not validated, the field name is.
        """
        name = _FIELD_NAMES.get(field)
        if name is None:
            raise InvalidInputError(f"field {field!r} is not editable")

        for row in self._rows:
            if row.id == row_id:
                setattr(row, name, value)
                return True

        return False

    # --- correlation mutations ---

    def find_next_uncorrelated(self) -> ShotRow:
        correlated = self._correlated_shots()
        for row in self._rows:
            if row.shot_number not in correlated:
                return self._view(row, correlated)

        raise NoUncorrelatedShotError()

    def create_correlation_for(self, row: ShotRow, text: str = PLACEHOLDER_TEXT) -> Correlation:
        corr = Correlation(text_id=new_text_id(), shot_number=row.shot_number, text=text)
        self._correlations.append(corr)
        logger.debug("correlation %s created for shot %s", corr.text_id, row.shot_number)
        return corr.model_copy()

    def correlate_selection(self, shot_number: int, text: str) -> Correlation:
        """Link a piece of selected script text to an existing shot."""
        if not text or not text.strip():
            raise InvalidInputError("Please select some text to correlate with a shot.")

        for row in self._rows:
            if row.shot_number == shot_number:
                return self.create_correlation_for(row, text=text)

        raise InvalidInputError(f"no shot with number {shot_number}")

    def update_correlation_text(self, text_id: str, text: str) -> bool:
        for corr in self._correlations:
            if corr.text_id == text_id:
                corr.text = text
                return True
        return False

    def edit_shot_text(self, shot_number: int, text: str) -> bool:
        """Micro-editor edit: replaces the text of the shot's first correlation."""
        for corr in self._correlations:
            if corr.shot_number == shot_number:
                corr.text = text
                return True
        return False
