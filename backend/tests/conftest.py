import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from camera_tracker.config import Settings
from camera_tracker.database import Base, build_session_factory
from camera_tracker.main import create_app
from camera_tracker.services.detection_store import DetectionStore
from camera_tracker.services.media_locator import MediaLocator


class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name

    def exists(self, timeout=None):
        return self.name in self.bucket.objects

    def make_public(self, timeout=None):
        self.bucket.made_public.append(self.name)

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/{self.bucket.name}/{self.name}"


class FakeBucket:
    def __init__(self, name="test-bucket", objects=()):
        self.name = name
        self.objects = set(objects)
        self.made_public = []

    def blob(self, name):
        return FakeBlob(self, name)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    from camera_tracker import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return DetectionStore(db)


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def app(session_factory, bucket):
    settings = Settings(database_uri="sqlite://", timezone="UTC")
    return create_app(settings, session_factory=session_factory, media_locator=MediaLocator(bucket))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_payload():
    return detection_payload


def detection_payload(**overrides):
    payload = {
        "cameraId": "cam-1",
        "videoId": "v1",
        "item": "cup",
        "confidence": 0.9,
        "timestamp": "2024-05-01T10:00:00Z",
        "timestampSec": 0,
    }
    payload.update(overrides)
    return payload
