from datetime import datetime
from typing import Optional

from .base import CamelModel


class ProjectBase(CamelModel):
    name: str
    description: Optional[str] = None
    type: str = "Script"


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None


class Project(ProjectBase):
    id: int
    created_at: datetime
    created_by: Optional[str] = None
