from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship

from scriptboard.db.base import Base


class ScriptData(Base):
    """
    One full snapshot per project: both documents plus the shot sheet and
    its correlations. Always replaced wholesale, never patched.
    """
    __tablename__ = "script_data"

    id = Column(Integer, primary_key=True, index=True)

    project_id = Column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    script_content = Column(Text, nullable=False)
    final_content = Column(Text, nullable=True)

    # JSON lists in wire (camelCase) form
    correlations = Column(JSON, nullable=False, default=list)
    spreadsheet_data = Column(JSON, nullable=False, default=list)

    # monotonically increasing; writes with version <= stored are rejected
    version = Column(Integer, nullable=False, default=0)

    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    project = relationship("Project", back_populates="script_data")
