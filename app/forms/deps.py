from __future__ import annotations

from pathlib import Path

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.core.settings import get_settings
from app.forms.storage import ArtifactStorage, DatabaseArtifactStorage


def get_artifact_storage(session: AsyncSession = Depends(get_session)) -> ArtifactStorage:
    settings = get_settings()
    return DatabaseArtifactStorage(
        session=session,
        base_dir=Path(settings.artifact_storage_base_path),
        public_base_url=settings.public_base_url,
    )
