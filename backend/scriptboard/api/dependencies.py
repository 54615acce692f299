from typing import Generator, Optional

from fastapi import Header

from scriptboard.db.session import SessionLocal
from scriptboard.services.realtime import RealtimeChannel, channel


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_identity(x_user: Optional[str] = Header(default=None)) -> Optional[str]:
    """Display name of the caller, for attribution only. Never used to authorize."""
    if x_user is None:
        return None
    return x_user.strip() or None


def get_channel() -> RealtimeChannel:
    return channel
