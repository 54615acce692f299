from scriptboard.db.base import Base
from .project import Project
from .script_data import ScriptData

__all__ = ["Base", "Project", "ScriptData"]
