from .project import Project, ProjectCreate, ProjectUpdate
from .script_data import (
    AssembleResponse,
    Correlation,
    ScriptData,
    ScriptSnapshot,
    ShotRow,
)

__all__ = [
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "AssembleResponse",
    "Correlation",
    "ScriptData",
    "ScriptSnapshot",
    "ShotRow",
]
