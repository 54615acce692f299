"""
Explicit document model for the script and final editors.

A document is an ordered list of typed blocks; render() is the only place
markup gets produced. Content typed by the user in the rich-text editor is
carried through untouched as RawMarkup, everything generated from shots and
correlations is escaped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import List, Optional, Tuple


class Block:
    def render(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class RawMarkup(Block):
    markup: str

    def render(self) -> str:
        return self.markup


@dataclass(frozen=True)
class Paragraph(Block):
    text: str

    def render(self) -> str:
        return f"<p>{escape(self.text, quote=False)}</p>"


@dataclass(frozen=True)
class CorrelatedSpan(Block):
    """Script text linked to a shot; the editor highlights these."""
    text_id: str
    shot_number: int
    text: str

    def render(self) -> str:
        return (
            f'<p><span class="correlated" data-text-id="{escape(self.text_id)}" '
            f'data-shot="{self.shot_number}">{escape(self.text, quote=False)}</span></p>'
        )


@dataclass(frozen=True)
class Divider(Block):
    def render(self) -> str:
        return '<hr class="shot-divider">'


@dataclass(frozen=True)
class ShotHeader(Block):
    shot_number: int
    scene_label: Optional[str] = None

    def render(self) -> str:
        label = f" - {escape(self.scene_label, quote=False)}" if self.scene_label else ""
        return f'<div class="shot-header"><strong>Shot {self.shot_number}</strong>{label}</div>'


@dataclass(frozen=True)
class ShotDetails(Block):
    slug: str
    on_screen: str
    cam_op: str
    location: str

    def render(self) -> str:
        rows = [
            ("Slug", self.slug),
            ("On-Screen", self.on_screen),
            ("Cam. Op.", self.cam_op),
            ("Location", self.location),
        ]
        cells = "".join(
            f"<div><strong>{label}:</strong> {escape(value, quote=False)}</div>"
            for label, value in rows
        )
        return f'<div class="shot-details">{cells}</div>'


@dataclass(frozen=True)
class MissingDetails(Block):
    def render(self) -> str:
        return '<div class="shot-details">No shot details available</div>'


@dataclass(frozen=True)
class Section(Block):
    css_class: str
    children: Tuple[Block, ...] = ()

    def render(self) -> str:
        inner = "".join(child.render() for child in self.children)
        return f'<div class="{self.css_class}">{inner}</div>'


@dataclass
class Document:
    blocks: List[Block] = field(default_factory=list)

    @classmethod
    def from_markup(cls, markup: str) -> "Document":
        if not markup:
            return cls()
        return cls([RawMarkup(markup)])

    def append(self, block: Block) -> None:
        self.blocks.append(block)

    def render(self) -> str:
        return "".join(block.render() for block in self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)
