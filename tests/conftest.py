from __future__ import annotations

import asyncio
import os

import pytest

from app.core.db import create_engine, create_schema


@pytest.fixture()
def database_url(tmp_path) -> str:
    db_file = tmp_path / "test.sqlite3"
    return f"sqlite+aiosqlite:///{db_file}"


@pytest.fixture()
def artifact_dir(tmp_path):
    return tmp_path / "artifacts"


@pytest.fixture(autouse=True)
def _set_test_environment(database_url: str, artifact_dir, monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("ARTIFACT_STORAGE_BASE_PATH", str(artifact_dir))
    monkeypatch.setenv("PUBLIC_BASE_URL", "http://testserver")
    # Never pick up a developer's real key; tests override the LLM client explicitly.
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    # Settings are cached via @lru_cache; clear so each test sees its own environment.
    from app.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _create_test_schema(database_url: str) -> None:
    async def run() -> None:
        engine = create_engine(database_url=database_url)
        await create_schema(engine=engine)
        await engine.dispose()

    asyncio.run(run())


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from app.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
