import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scriptboard import models  # noqa: F401
from scriptboard.api.dependencies import get_channel, get_db
from scriptboard.db.base import Base
from scriptboard.editor.session import Identity
from scriptboard.main import app
from scriptboard.services.realtime import ConnectionManager, RealtimeChannel


class RecordingChannel(RealtimeChannel):
    def __init__(self):
        super().__init__(ConnectionManager(), redis_factory=lambda: None)
        self.events = []

    async def publish(self, event):
        self.events.append(event)
        await super().publish(event)


@pytest.fixture
def identity():
    return Identity(user_id=7, display_name="Dana")


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def client(session_factory, channel):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_channel] = lambda: channel

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def project_id(client):
    resp = client.post("/api/v1/projects/", json={"name": "Summer Vlog"}, headers={"X-User": "Dana"})
    assert resp.status_code == 201
    return resp.json()["id"]
