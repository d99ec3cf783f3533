"""Shared pytest fixtures for app.standup tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from app.standup.config.settings import JobLocation, ScheduleDefaults
from app.standup.context import AppContext
from app.standup.state.store import JsonStateStore
from app.standup.tests.fakes import TARGET_URL, FakeCredentials, FakeJobRegistry


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setenv("STANDUP_DATA_DIR", str(data_dir))
    monkeypatch.setenv("DOTENV_PATH", str(tmp_path / ".env"))
    return data_dir


@pytest.fixture(autouse=True)
def _reset_singletons(_isolate_data_dir: Path):
    from app.standup.util.singletons import reset_all_singletons

    reset_all_singletons()
    yield
    reset_all_singletons()


@pytest.fixture()
def data_dir(_isolate_data_dir: Path) -> Path:
    return _isolate_data_dir


@pytest.fixture()
def store(data_dir: Path) -> JsonStateStore:
    return JsonStateStore(data_dir / "state.json")


@pytest.fixture()
def jobs() -> FakeJobRegistry:
    return FakeJobRegistry()


@pytest.fixture()
def chat() -> AsyncMock:
    client = AsyncMock()
    client.send_message.return_value = 200
    return client


@pytest.fixture()
def credentials() -> FakeCredentials:
    return FakeCredentials()


@pytest.fixture()
def ctx(store: JsonStateStore, jobs: FakeJobRegistry, chat: AsyncMock, credentials: FakeCredentials) -> AppContext:
    return AppContext(
        store=store,
        jobs=jobs,
        chat=chat,
        credentials=credentials,
        schedule_defaults=ScheduleDefaults(),
        job_location=JobLocation(project="proj", location="us-central1", target_url=TARGET_URL),
    )
