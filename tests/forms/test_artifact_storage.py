from __future__ import annotations

import hashlib
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import StorageError
from app.forms.models import FileDistribution, StoredFile
from app.forms.storage import (
    PUBLIC_LINK_POLICY,
    DatabaseArtifactStorage,
    LinkPolicy,
    resolve_public_file,
)
from tests.forms._helpers import run_with_session


def _storage(session: AsyncSession, artifact_dir: Path) -> DatabaseArtifactStorage:
    return DatabaseArtifactStorage(
        session=session, base_dir=artifact_dir, public_base_url="https://files.example/"
    )


def test_write_persists_file_and_metadata(database_url: str, artifact_dir: Path) -> None:
    async def scenario(session: AsyncSession):
        storage = _storage(session, artifact_dir)
        record_id = await storage.write(title="T", file_name="T.txt", content=b"FILLED FORM")
        content_id = await storage.read_back(record_id=record_id)
        row = (await session.execute(select(StoredFile))).scalar_one()
        return record_id, content_id, row

    record_id, content_id, row = run_with_session(database_url, scenario)

    assert row.id == record_id
    assert row.content_id == content_id
    assert content_id != record_id
    assert row.title == "T"
    assert row.file_name == "T.txt"
    assert row.size_bytes == len(b"FILLED FORM")
    assert row.checksum_sha256 == hashlib.sha256(b"FILLED FORM").hexdigest()
    assert not Path(row.storage_key).is_absolute()
    assert (artifact_dir / row.storage_key).read_bytes() == b"FILLED FORM"


def test_create_link_and_read_back_public_url(database_url: str, artifact_dir: Path) -> None:
    async def scenario(session: AsyncSession):
        storage = _storage(session, artifact_dir)
        record_id = await storage.write(title="T", file_name="T.txt", content=b"x")
        content_id = await storage.read_back(record_id=record_id)
        distribution_id = await storage.create_link(
            content_id=content_id, name="T", policy=PUBLIC_LINK_POLICY
        )
        url = await storage.read_back_link(distribution_id=distribution_id)
        row = (await session.execute(select(FileDistribution))).scalar_one()
        return url, row

    url, row = run_with_session(database_url, scenario)

    assert url == f"https://files.example/public/files/{row.public_token}"
    assert row.allow_view_in_browser is True
    assert row.password_required is False
    assert row.expires_at is None


def test_read_back_unknown_record_raises_storage_error(
    database_url: str, artifact_dir: Path
) -> None:
    async def scenario(session: AsyncSession):
        await _storage(session, artifact_dir).read_back(record_id="missing")

    with pytest.raises(StorageError):
        run_with_session(database_url, scenario)


def test_read_back_link_unknown_distribution_raises_storage_error(
    database_url: str, artifact_dir: Path
) -> None:
    async def scenario(session: AsyncSession):
        await _storage(session, artifact_dir).read_back_link(distribution_id="missing")

    with pytest.raises(StorageError):
        run_with_session(database_url, scenario)


def test_write_failure_raises_storage_error(database_url: str, tmp_path: Path) -> None:
    # A regular file where the base directory should be makes every write fail.
    blocked = tmp_path / "not-a-dir"
    blocked.write_text("occupied")

    async def scenario(session: AsyncSession):
        await _storage(session, blocked).write(title="T", file_name="T.txt", content=b"x")

    with pytest.raises(StorageError):
        run_with_session(database_url, scenario)


def test_resolve_public_file_hides_expired_links(database_url: str, artifact_dir: Path) -> None:
    expired = LinkPolicy(expires_at=datetime.now(UTC) - timedelta(minutes=1))

    async def scenario(session: AsyncSession):
        storage = _storage(session, artifact_dir)
        record_id = await storage.write(title="T", file_name="T.txt", content=b"x")
        content_id = await storage.read_back(record_id=record_id)
        live_id = await storage.create_link(
            content_id=content_id, name="live", policy=PUBLIC_LINK_POLICY
        )
        expired_id = await storage.create_link(content_id=content_id, name="old", policy=expired)

        tokens = {}
        for name, distribution_id in (("live", live_id), ("old", expired_id)):
            url = await storage.read_back_link(distribution_id=distribution_id)
            tokens[name] = url.rsplit("/", 1)[-1]

        live = await resolve_public_file(
            session=session, base_dir=artifact_dir, public_token=tokens["live"]
        )
        old = await resolve_public_file(
            session=session, base_dir=artifact_dir, public_token=tokens["old"]
        )
        unknown = await resolve_public_file(
            session=session, base_dir=artifact_dir, public_token="nope"
        )
        return live, old, unknown

    live, old, unknown = run_with_session(database_url, scenario)

    assert live is not None
    assert live.file_name == "T.txt"
    assert live.inline is True
    assert live.path.read_bytes() == b"x"
    assert old is None
    assert unknown is None


async def _database_down(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("db down"))


@pytest.mark.parametrize(
    "step",
    [
        lambda storage: storage.read_back(record_id="r"),
        lambda storage: storage.read_back_link(distribution_id="d"),
    ],
    ids=["read_back", "read_back_link"],
)
def test_read_back_database_error_raises_storage_error(
    step, database_url: str, artifact_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(AsyncSession, "execute", _database_down)

    async def scenario(session: AsyncSession):
        await step(_storage(session, artifact_dir))

    with pytest.raises(StorageError) as excinfo:
        run_with_session(database_url, scenario)

    assert isinstance(excinfo.value.__cause__, OperationalError)
