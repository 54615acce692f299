from .base import Base
from .session import engine, SessionLocal

__all__ = ["Base", "engine", "SessionLocal"]
