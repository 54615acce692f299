"""
Render correlated script text into the two generated document views.

- script view: one section per shot, header + the correlated paragraphs
- final view: the same plus the shot's sheet details

Both are pure functions of (correlations, rows). Groups are ordered by
numeric shot number, correlations keep their insertion order inside a
group, and a divider separates consecutive groups.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from scriptboard.core.errors import NothingToAssembleError
from scriptboard.editor.document import (
    Block,
    Divider,
    Document,
    MissingDetails,
    Paragraph,
    Section,
    ShotDetails,
    ShotHeader,
)
from scriptboard.schemas.script_data import Correlation, ShotRow

SCRIPT_CONTAINER = "correlated-script"
FINAL_CONTAINER = "final-output"


def group_by_shot(correlations: Sequence[Correlation]) -> List[Tuple[int, List[Correlation]]]:
    groups: Dict[int, List[Correlation]] = {}
    for corr in correlations:
        groups.setdefault(corr.shot_number, []).append(corr)
    return sorted(groups.items(), key=lambda item: item[0])


def _rows_by_shot(rows: Sequence[ShotRow]) -> Dict[int, ShotRow]:
    # shot numbers are not guaranteed unique; the first row wins
    index: Dict[int, ShotRow] = {}
    for row in rows:
        index.setdefault(row.shot_number, row)
    return index


def _header(shot_number: int, row: Optional[ShotRow]) -> ShotHeader:
    return ShotHeader(shot_number=shot_number, scene_label=row.scene_label if row else None)


def _details(row: Optional[ShotRow]) -> Block:
    if row is None:
        return MissingDetails()
    return ShotDetails(
        slug=row.slug,
        on_screen=row.on_screen,
        cam_op=row.cam_op,
        location=row.location,
    )


def _texts(correlations: Sequence[Correlation]) -> Section:
    return Section("shot-content", tuple(Paragraph(c.text) for c in correlations))


def _script_section(shot_number: int, row: Optional[ShotRow], group: Sequence[Correlation]) -> Section:
    return Section("shot-section", (_header(shot_number, row), _texts(group)))


def _final_section(shot_number: int, row: Optional[ShotRow], group: Sequence[Correlation]) -> Section:
    return Section(
        "shot-container",
        (_header(shot_number, row), _details(row), _texts(group)),
    )


def _build(correlations, rows, section_fn, container: str) -> Document:
    by_shot = _rows_by_shot(rows)
    children: List[Block] = []

    for i, (shot_number, group) in enumerate(group_by_shot(correlations)):
        if i > 0:
            children.append(Divider())
        children.append(section_fn(shot_number, by_shot.get(shot_number), group))

    return Document([Section(container, tuple(children))])


def build_script_document(correlations: Sequence[Correlation], rows: Sequence[ShotRow]) -> Document:
    if not correlations:
        raise NothingToAssembleError("No correlations found. Create correlations in the Micro tab first.")
    return _build(correlations, rows, _script_section, SCRIPT_CONTAINER)


def build_final_document(correlations: Sequence[Correlation], rows: Sequence[ShotRow]) -> Document:
    if not correlations or not rows:
        raise NothingToAssembleError("Missing data. Both shot data and correlations are required.")
    return _build(correlations, rows, _final_section, FINAL_CONTAINER)


def assemble_script(correlations: Sequence[Correlation], rows: Sequence[ShotRow]) -> str:
    return build_script_document(correlations, rows).render()


def assemble_final(correlations: Sequence[Correlation], rows: Sequence[ShotRow]) -> str:
    return build_final_document(correlations, rows).render()


def render_shot(row: ShotRow, correlations: Sequence[Correlation]) -> str:
    """Single final-view block for one shot ("send to final")."""
    group = [c for c in correlations if c.shot_number == row.shot_number]
    return _final_section(row.shot_number, row, group).render()


def count_groups(correlations: Sequence[Correlation]) -> int:
    return len({c.shot_number for c in correlations})
