"""
Shared fixtures: a temporary artifact root, a file-backed SQLite database and
the core components wired the same way the application wires them.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Keep the module-level app created by releasehub.main out of the project tree
_SCRATCH = tempfile.mkdtemp(prefix="releasehub-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_SCRATCH}/import.db")
os.environ.setdefault("RELEASE_ROOT", os.path.join(_SCRATCH, "release"))
os.environ.setdefault("LOG_DIR", os.path.join(_SCRATCH, "logs"))

from releasehub.core.config import AppSettings
from releasehub.database.db_setup import create_db_engine, create_session_factory
from releasehub.database.initialize_db import init_db
from releasehub.infrastructure.release_ids import ReleaseIdGenerator
from releasehub.infrastructure.storage.local_fs import LocalFileSystemStorage
from releasehub.services.download_tracker import DownloadTracker
from releasehub.services.link_registry import LinkRegistry
from releasehub.services.release_store import ReleaseStore
from releasehub.services.subscriber_service import SubscriberService

ADMIN_AUTH = ("admin", "test-admin-password")


class SteppingClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def storage(tmp_path):
    return LocalFileSystemStorage(tmp_path / "release")


@pytest.fixture
def clock():
    return SteppingClock(datetime(2026, 2, 16, 1, 30, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(storage, clock):
    return ReleaseStore(storage, id_generator=ReleaseIdGenerator(storage, clock=clock), chunk_size=4)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'releasehub.db'}")
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def registry(session_factory):
    return LinkRegistry(session_factory)


@pytest.fixture
def tracker(session_factory, registry, store):
    return DownloadTracker(session_factory, registry, store)


@pytest.fixture
def subscribers(session_factory):
    return SubscriberService(session_factory)


@pytest.fixture
def app_settings(tmp_path):
    return AppSettings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'api.db'}",
        RELEASE_ROOT=str(tmp_path / "api-release"),
        LOG_DIR=str(tmp_path / "logs"),
        BASE_URL="https://dl.example.com/",
        ADMIN_USERNAME=ADMIN_AUTH[0],
        ADMIN_PASSWORD=ADMIN_AUTH[1],
        EMAIL_RETRY_MAX_ATTEMPTS=1,
    )


@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    async def _record(mail_config, *, email, subject, body):
        sent.append({"email": email, "subject": subject, "body": body})

    monkeypatch.setattr("releasehub.services.email_service.email_worker.send_release_email", _record)
    return sent


@pytest.fixture
def client(app_settings, sent_emails):
    from fastapi.testclient import TestClient

    from releasehub.main import create_app

    with TestClient(create_app(app_settings)) as test_client:
        yield test_client
