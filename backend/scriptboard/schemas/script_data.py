from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from .base import CamelModel

DEFAULT_SCRIPT_CONTENT = "<p>Enter your script here...</p>"
DEFAULT_FINAL_CONTENT = "<p>Final formatted content will appear here...</p>"


class ShotRow(CamelModel):
    id: int
    scene_label: str = ""
    shot_number: int
    slug: str = ""
    on_screen: str = ""
    cam_op: str = ""
    location: str = ""

    # derived from the correlation set whenever rows are read; ignored on input
    has_correlation: bool = False


class Correlation(CamelModel):
    text_id: str
    shot_number: int
    text: str = ""


class ScriptSnapshot(CamelModel):
    """Full serializable state of one project's script data."""
    spreadsheet_data: List[ShotRow] = Field(default_factory=list)
    script_content: str = DEFAULT_SCRIPT_CONTENT
    final_content: str = DEFAULT_FINAL_CONTENT
    correlations: List[Correlation] = Field(default_factory=list)
    version: int = Field(default=0, ge=0)


class ScriptData(ScriptSnapshot):
    id: int
    project_id: int
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AssembleResponse(CamelModel):
    project_id: int
    mode: Literal["script", "final"]
    content: str
    groups: int
