"""create stored_files and file_distributions tables

Revision ID: 0002_create_stored_files_and_distributions
Revises: 0001_create_benefits
Create Date: 2026-10-18

"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0002_create_stored_files_and_distributions"
down_revision = "0001_create_benefits"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "stored_files",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("content_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("storage_key", sa.String(length=1024), nullable=False),
        sa.Column("size_bytes", sa.BigInteger(), nullable=False),
        sa.Column("checksum_sha256", sa.String(length=64), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.UniqueConstraint("content_id", name=op.f("uq_stored_files_content_id")),
        sa.CheckConstraint(
            "storage_key NOT LIKE '/%' AND storage_key NOT LIKE '%..%'",
            name=op.f("ck_stored_files_stored_files_storage_key_relative"),
        ),
        sa.CheckConstraint(
            "length(checksum_sha256) = 64",
            name=op.f("ck_stored_files_stored_files_checksum_len_64"),
        ),
    )

    op.create_table(
        "file_distributions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "content_id",
            sa.String(length=36),
            sa.ForeignKey(
                "stored_files.content_id",
                name=op.f("fk_file_distributions_content_id_stored_files"),
                ondelete="RESTRICT",
            ),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("public_token", sa.String(length=64), nullable=False),
        sa.Column("allow_view_in_browser", sa.Boolean(), nullable=False),
        sa.Column("password_required", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.UniqueConstraint("public_token", name=op.f("uq_file_distributions_public_token")),
    )
    op.create_index(
        op.f("ix_file_distributions_content_id"),
        "file_distributions",
        ["content_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_file_distributions_content_id"), table_name="file_distributions")
    op.drop_table("file_distributions")
    op.drop_table("stored_files")
