from __future__ import annotations

from typing import Optional

from scriptboard.core.errors import InvalidInputError
from scriptboard.editor.store import CorrelationStore
from scriptboard.schemas.script_data import ShotRow


class ShotNavigator:
    """
    Zero-based cursor over the store's rows. Moving past either end does
    nothing; the cursor is never persisted.
    """

    def __init__(self, store: CorrelationStore):
        self._store = store
        self.index = 0

    def __len__(self) -> int:
        return len(self._store)

    def next(self) -> int:
        if self.index < len(self) - 1:
            self.index += 1
        return self.index

    def previous(self) -> int:
        if self.index > 0:
            self.index -= 1
        return self.index

    def jump_to(self, index: int) -> int:
        if not 0 <= index < len(self):
            raise InvalidInputError(f"shot index {index} out of range (0..{len(self) - 1})")
        self.index = index
        return self.index

    @property
    def at_start(self) -> bool:
        return self.index == 0

    @property
    def at_end(self) -> bool:
        return self.index >= len(self) - 1

    def current(self) -> Optional[ShotRow]:
        if len(self) == 0:
            return None
        return self._store.row_at(self.index)
