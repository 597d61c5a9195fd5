from __future__ import annotations

import asyncio

import pytest

from app.domain.exceptions import StorageError
from app.forms.publisher import PublicLink, publish_artifact
from app.forms.storage import LinkPolicy
from tests.forms._helpers import FakeArtifactStorage


def test_publish_runs_write_readback_link_readback_in_order() -> None:
    storage = FakeArtifactStorage(url="https://files.example/abc")

    link = asyncio.run(
        publish_artifact(storage=storage, title="Filled Benefit Form - B1", content=b"FILLED FORM")
    )

    assert link == PublicLink(url="https://files.example/abc")
    assert storage.calls == ["write", "read_back", "create_link", "read_back_link"]
    assert storage.files == {
        "rec-1": ("Filled Benefit Form - B1", "Filled Benefit Form - B1.txt", b"FILLED FORM")
    }


def test_publish_links_read_back_content_id_with_public_policy() -> None:
    storage = FakeArtifactStorage()

    asyncio.run(publish_artifact(storage=storage, title="T", content=b""))

    content_id, name, policy = storage.links[0]
    assert content_id == "content-rec-1"
    assert name == "T"
    assert policy == LinkPolicy(
        allow_view_in_browser=True, password_required=False, expires_at=None
    )


def test_publish_link_failure_propagates_and_keeps_written_file() -> None:
    storage = FakeArtifactStorage(fail_on="create_link")

    with pytest.raises(StorageError):
        asyncio.run(publish_artifact(storage=storage, title="T", content=b"data"))

    assert storage.calls == ["write", "read_back", "create_link"]
    # No rollback: the orphaned file stays.
    assert list(storage.files) == ["rec-1"]


def test_publish_write_failure_stops_before_link() -> None:
    storage = FakeArtifactStorage(fail_on="write")

    with pytest.raises(StorageError):
        asyncio.run(publish_artifact(storage=storage, title="T", content=b"data"))

    assert storage.calls == ["write"]
    assert storage.links == []
