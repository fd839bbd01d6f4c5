import base64
import io
from typing import List

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from files_manager.application.ports.job_queue import ThumbnailJob
from files_manager.config import Settings
from files_manager.database import build_engine, create_db_and_tables
from files_manager.infrastructure.cache.memory_session_store import InMemorySessionStore
from files_manager.infrastructure.storage.local_blob_store import LocalBlobStore
from files_manager.main import create_app


def make_png(width: int, height: int, color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def basic_auth(email: str, password: str) -> str:
    return "Basic " + b64(f"{email}:{password}".encode())


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingJobQueue:
    def __init__(self):
        self.jobs: List[ThumbnailJob] = []

    def enqueue(self, job: ThumbnailJob) -> None:
        self.jobs.append(job)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_store(clock):
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'files.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "blobs"))


@pytest.fixture
def job_queue():
    return RecordingJobQueue()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        SESSION_BACKEND="memory",
        JOB_QUEUE_BACKEND="memory",
        FOLDER_PATH=str(tmp_path / "blobs"),
        DATABASE_URL=f"sqlite:///{tmp_path / 'files.db'}",
    )


@pytest.fixture
def client(settings, engine, session_store, blob_store, job_queue):
    app = create_app(
        settings,
        engine=engine,
        session_store=session_store,
        blob_store=blob_store,
        job_queue=job_queue,
    )
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(client):
    """Register a user and open a session, returning ``(user_id, token)``."""

    def _login(email: str = "bob@dylan.com", password: str = "toto1234!"):
        r = client.post("/users", json={"email": email, "password": password})
        assert r.status_code == 201, r.text
        user_id = r.json()["id"]
        r = client.get("/connect", headers={"Authorization": basic_auth(email, password)})
        assert r.status_code == 200, r.text
        return user_id, r.json()["token"]

    return _login
