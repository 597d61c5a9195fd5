from __future__ import annotations

import secrets
import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _new_public_token() -> str:
    return secrets.token_urlsafe(24)


class Benefit(Base):
    """A government benefits document whose raw text is filled in by the LLM."""

    __tablename__ = "benefits"

    # Opaque identifier; callers pass it through unchanged (e.g. "B1" or a UUID string).
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    raw_text: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


class StoredFile(Base):
    """
    Metadata for a generated artifact written to the file store.

    `content_id` is assigned at insert and is the only handle link creation accepts;
    the write step returns the record id, so callers read the row back to obtain it.
    Rows are write-once.
    """

    __tablename__ = "stored_files"
    __table_args__ = (
        CheckConstraint(
            "storage_key NOT LIKE '/%' AND storage_key NOT LIKE '%..%'",
            name="stored_files_storage_key_relative",
        ),
        CheckConstraint("length(checksum_sha256) = 64", name="stored_files_checksum_len_64"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    content_id: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, default=_new_id
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(1024), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    checksum_sha256: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class FileDistribution(Base):
    """A public, unauthenticated download link for a stored file."""

    __tablename__ = "file_distributions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    content_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("stored_files.content_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    public_token: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True, default=_new_public_token
    )

    allow_view_in_browser: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    password_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # NULL means the link never expires.
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
