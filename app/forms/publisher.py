from __future__ import annotations

from dataclasses import dataclass

from app.forms.storage import PUBLIC_LINK_POLICY, ArtifactStorage

ARTIFACT_FILE_EXTENSION = ".txt"


@dataclass(frozen=True)
class GeneratedArtifact:
    title: str
    file_name: str
    content: bytes


@dataclass(frozen=True)
class PublicLink:
    url: str


async def publish_artifact(*, storage: ArtifactStorage, title: str, content: bytes) -> PublicLink:
    """
    Store `content` as a text file and create a public link for it.

    Four sequential calls; each create is followed by a read-back because the store only
    exposes derived fields (content id, public URL) on read. Nothing is cleaned up when a
    later step fails: an orphaned file is left behind and the StorageError propagates.
    """

    artifact = GeneratedArtifact(
        title=title, file_name=f"{title}{ARTIFACT_FILE_EXTENSION}", content=content
    )

    record_id = await storage.write(
        title=artifact.title, file_name=artifact.file_name, content=artifact.content
    )
    content_id = await storage.read_back(record_id=record_id)
    distribution_id = await storage.create_link(
        content_id=content_id, name=artifact.title, policy=PUBLIC_LINK_POLICY
    )
    url = await storage.read_back_link(distribution_id=distribution_id)
    return PublicLink(url=url)
