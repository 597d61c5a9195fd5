from __future__ import annotations

import hashlib
import os
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.domain.exceptions import StorageError
from app.forms.models import FileDistribution, StoredFile


@dataclass(frozen=True)
class LinkPolicy:
    allow_view_in_browser: bool = True
    password_required: bool = False
    expires_at: datetime | None = None  # None: never expires


PUBLIC_LINK_POLICY = LinkPolicy()


class ArtifactStorage(Protocol):
    """
    File store with public links.

    Writes do not return derived fields, so each create is followed by a read-back:
    write -> read_back (content id), create_link -> read_back_link (public URL).
    """

    async def write(self, *, title: str, file_name: str, content: bytes) -> str: ...

    async def read_back(self, *, record_id: str) -> str: ...

    async def create_link(self, *, content_id: str, name: str, policy: LinkPolicy) -> str: ...

    async def read_back_link(self, *, distribution_id: str) -> str: ...


def _safe_join(base_dir: Path, key: str) -> Path:
    """
    Prevent path traversal. `key` must stay within `base_dir`.
    """

    base_dir = base_dir.resolve()
    candidate = (base_dir / key).resolve()
    if base_dir == candidate or base_dir in candidate.parents:
        return candidate
    raise StorageError("Invalid storage key")


def _write_bytes_to_path(*, content: bytes, dest_path: Path) -> str:
    """
    Synchronous create-only write (called in a threadpool). Returns the sha256 hex digest.
    """

    dest_path.parent.mkdir(parents=True, exist_ok=True)

    # Create new file only; never overwrite an existing artifact.
    fd = os.open(str(dest_path), os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(content)
        f.flush()
        os.fsync(f.fileno())

    return hashlib.sha256(content).hexdigest()


def build_public_url(*, public_base_url: str, public_token: str) -> str:
    return f"{public_base_url.rstrip('/')}/public/files/{public_token}"


class DatabaseArtifactStorage:
    """
    Artifact bytes on local disk, metadata and links in the database.

    Key format is UUID-based: {yyyy}/{mm}/{random_uuid}. Each operation commits on its
    own, so a failure in a later step leaves earlier rows and files in place.
    """

    def __init__(self, *, session: AsyncSession, base_dir: Path, public_base_url: str):
        self._session = session
        self._base_dir = base_dir
        self._public_base_url = public_base_url

    async def write(self, *, title: str, file_name: str, content: bytes) -> str:
        now = datetime.now(UTC)
        key = str(Path(f"{now:%Y}") / f"{now:%m}" / str(uuid.uuid4()))
        dest_path = _safe_join(self._base_dir, key)

        try:
            checksum = await run_in_threadpool(
                _write_bytes_to_path, content=content, dest_path=dest_path
            )
        except OSError as exc:
            raise StorageError("Failed to write artifact file") from exc

        record = StoredFile(
            title=title,
            file_name=file_name,
            storage_key=key,
            size_bytes=len(content),
            checksum_sha256=checksum,
        )
        self._session.add(record)
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise StorageError("Failed to record artifact file") from exc
        return record.id

    async def read_back(self, *, record_id: str) -> str:
        stmt = select(StoredFile.content_id).where(StoredFile.id == record_id)
        try:
            content_id = (await self._session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to read back stored file") from exc
        if content_id is None:
            raise StorageError("Stored file not found after write")
        return content_id

    async def create_link(self, *, content_id: str, name: str, policy: LinkPolicy) -> str:
        distribution = FileDistribution(
            content_id=content_id,
            name=name,
            allow_view_in_browser=policy.allow_view_in_browser,
            password_required=policy.password_required,
            expires_at=policy.expires_at,
        )
        self._session.add(distribution)
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise StorageError("Failed to create public link") from exc
        return distribution.id

    async def read_back_link(self, *, distribution_id: str) -> str:
        stmt = select(FileDistribution.public_token).where(FileDistribution.id == distribution_id)
        try:
            token = (await self._session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to read back public link") from exc
        if token is None:
            raise StorageError("Public link not found after creation")
        return build_public_url(public_base_url=self._public_base_url, public_token=token)


@dataclass(frozen=True)
class PublicFile:
    path: Path
    file_name: str
    inline: bool


async def resolve_public_file(
    *, session: AsyncSession, base_dir: Path, public_token: str
) -> PublicFile | None:
    """Resolve a public token to a servable file; None if unknown, expired or protected."""

    stmt = (
        select(FileDistribution, StoredFile)
        .join(StoredFile, StoredFile.content_id == FileDistribution.content_id)
        .where(FileDistribution.public_token == public_token)
    )
    row = (await session.execute(stmt)).first()
    if row is None:
        return None
    distribution, stored = row

    if distribution.password_required:
        return None
    if distribution.expires_at is not None:
        expires_at = distribution.expires_at
        if expires_at.tzinfo is None:
            # SQLite drops tzinfo; values are always written as UTC.
            expires_at = expires_at.replace(tzinfo=UTC)
        if expires_at <= datetime.now(UTC):
            return None

    path = _safe_join(base_dir, stored.storage_key)
    if not path.is_file():
        return None
    return PublicFile(
        path=path, file_name=stored.file_name, inline=distribution.allow_view_in_browser
    )
