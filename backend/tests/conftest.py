import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from clubhub.domain.registry import models
from clubhub.domain.registry.service import RegistryService
from clubhub.domain.registry.store import RegistryStore
from clubhub.main import create_app
from clubhub.settings import settings

ADMIN_TOKEN = "test-admin"


class RecordingListener:
    def __init__(self) -> None:
        self.calls = 0

    def notify_state_changed(self) -> None:
        self.calls += 1


def make_teacher(teacher_id: str, name: str = "", department: str = models.DEPARTMENTS[0]) -> models.Teacher:
    return models.Teacher(id=teacher_id, name=name or f"Teacher {teacher_id}", department=department)


def make_club(
    club_id: str,
    advisor_id: str,
    *,
    capacity: int = 25,
    co_advisor_id=None,
    level_target: models.LevelCategory = models.LevelCategory.BOTH,
    name: str = "",
    club_type: models.ClubType = models.ClubType.ACADEMIC,
) -> models.Club:
    return models.Club(
        id=club_id,
        name=name or f"Club {club_id}",
        type=club_type,
        description="",
        level_target=level_target,
        capacity=capacity,
        location="Room 101",
        phone="0800000000",
        advisor_id=advisor_id,
        co_advisor_id=co_advisor_id,
    )


def make_student(student_id: str, club_id: str, *, level: str = "ม.1", room: str = "1", seat: str = "1") -> models.Student:
    return models.Student(
        id=student_id,
        name=f"Student {student_id}",
        level=level,
        room=room,
        seat_number=seat,
        club_id=club_id,
    )


@pytest.fixture
def store() -> RegistryStore:
    return RegistryStore()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def service(store, listener) -> RegistryService:
    return RegistryService(store, listener=listener)


@pytest.fixture
def test_settings(tmp_path):
    return settings.model_copy(
        update={
            "sync_endpoint_url": "",
            "local_cache_dir": tmp_path / "cache",
            "sync_debounce_seconds": 0.01,
            "admin_token": ADMIN_TOKEN,
            "obs_metrics_public": False,
        }
    )


@pytest_asyncio.fixture
async def api_app(test_settings):
    application = create_app(test_settings)
    # ASGITransport does not run the lifespan, so load and shut down explicitly.
    await application.state.engine.load()
    try:
        yield application
    finally:
        await application.state.engine.shutdown()


@pytest_asyncio.fixture
async def api_client(api_app):
    transport = ASGITransport(app=api_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_TOKEN}
