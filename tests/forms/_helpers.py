"""Test helpers for the form-fill slice."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.db import create_engine
from app.domain.exceptions import StorageError
from app.forms.models import Benefit
from app.forms.storage import LinkPolicy

T = TypeVar("T")


def run_with_session(database_url: str, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """Run `fn` with a fresh session against the test database and return its result."""

    async def run() -> T:
        engine = create_engine(database_url=database_url)
        try:
            async with async_sessionmaker(engine, expire_on_commit=False)() as session:
                return await fn(session)
        finally:
            await engine.dispose()

    return asyncio.run(run())


def create_benefit(*, database_url: str, benefit_id: str, raw_text: str) -> None:
    async def insert(session: AsyncSession) -> None:
        session.add(Benefit(id=benefit_id, name=f"Benefit {benefit_id}", raw_text=raw_text))
        await session.commit()

    run_with_session(database_url, insert)


class FakeLLMClient:
    """Returns a canned completion and records every prompt it receives."""

    def __init__(self, text: str = "FILLED FORM"):
        self.text = text
        self.prompts: list[str] = []

    async def complete(self, *, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.text


class FakeArtifactStorage:
    """In-memory ArtifactStorage that records the order of calls."""

    def __init__(self, *, url: str = "https://files.example/abc", fail_on: str | None = None):
        self.url = url
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.files: dict[str, tuple[str, str, bytes]] = {}
        self.links: list[tuple[str, str, LinkPolicy]] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise StorageError(f"{name} rejected")

    async def write(self, *, title: str, file_name: str, content: bytes) -> str:
        self._record("write")
        record_id = f"rec-{len(self.files) + 1}"
        self.files[record_id] = (title, file_name, content)
        return record_id

    async def read_back(self, *, record_id: str) -> str:
        self._record("read_back")
        return f"content-{record_id}"

    async def create_link(self, *, content_id: str, name: str, policy: LinkPolicy) -> str:
        self._record("create_link")
        self.links.append((content_id, name, policy))
        return f"dist-{len(self.links)}"

    async def read_back_link(self, *, distribution_id: str) -> str:
        self._record("read_back_link")
        return self.url
