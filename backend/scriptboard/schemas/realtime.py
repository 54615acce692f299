from datetime import datetime
from typing import Literal, Optional

from .base import CamelModel


class ScriptDataEvent(CamelModel):
    """Published after a snapshot is stored."""
    type: Literal["script_data_updated"] = "script_data_updated"
    project_id: int
    version: int
    updated_by: Optional[str] = None


class ConnectionMessage(CamelModel):
    type: Literal["connection"] = "connection"
    status: str
    project_id: int
    timestamp: datetime
