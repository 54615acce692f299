from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship

from scriptboard.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(64), nullable=False, default="Script")
    created_at = Column(DateTime, default=datetime.utcnow)

    # display name of whoever created it (attribution only)
    created_by = Column(String(255), nullable=True)

    script_data = relationship(
        "ScriptData",
        back_populates="project",
        uselist=False,
        cascade="all, delete-orphan",
    )
