from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from storekeeper.client.drafts import Draft, FileDraftRepository, InMemoryDraftRepository

if TYPE_CHECKING:
    from pathlib import Path


class FakeClock:
    def __init__(self, now_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["memory", "file"])
def repo(request: pytest.FixtureRequest, clock: FakeClock, tmp_path: Path) -> InMemoryDraftRepository | FileDraftRepository:
    if request.param == "memory":
        return InMemoryDraftRepository(ttl_seconds=300, clock=clock)
    return FileDraftRepository(tmp_path / "drafts", ttl_seconds=300, clock=clock)


def _draft() -> Draft:
    return Draft(
        form_data={"project_name": "FTTH"},
        selected_approver_ids=[1, 2],
        selected_items=[{"name": "Drop cable", "requested": 3}],
    )


def test_missing_draft_loads_as_none(repo: InMemoryDraftRepository) -> None:
    assert repo.load("material_request-form") is None


def test_save_stamps_timestamp_and_round_trips(repo: InMemoryDraftRepository, clock: FakeClock) -> None:
    saved = repo.save("form", _draft())
    assert saved.timestamp == clock.now_ms
    loaded = repo.load("form")
    assert loaded == saved


def test_draft_kept_just_before_ttl(repo: InMemoryDraftRepository, clock: FakeClock) -> None:
    repo.save("form", _draft())
    clock.advance(299)
    assert repo.load("form") is not None


def test_draft_discarded_after_ttl(repo: InMemoryDraftRepository, clock: FakeClock) -> None:
    repo.save("form", _draft())
    clock.advance(301)
    assert repo.load("form") is None
    # The expired entry is gone even if the clock went backwards.
    clock.advance(-301)
    assert repo.load("form") is None


def test_draft_discarded_exactly_at_ttl(repo: InMemoryDraftRepository, clock: FakeClock) -> None:
    repo.save("form", _draft())
    clock.advance(300)
    assert repo.load("form") is None


def test_last_write_wins(repo: InMemoryDraftRepository, clock: FakeClock) -> None:
    repo.save("form", _draft())
    clock.advance(200)
    repo.save("form", Draft(form_data={"project_name": "Metro"}))
    clock.advance(200)
    loaded = repo.load("form")
    assert loaded is not None
    assert loaded.form_data == {"project_name": "Metro"}


def test_delete(repo: InMemoryDraftRepository) -> None:
    repo.save("form", _draft())
    repo.delete("form")
    repo.delete("form")
    assert repo.load("form") is None


def test_drafts_are_keyed_independently(repo: InMemoryDraftRepository) -> None:
    repo.save("material_request-form", _draft())
    assert repo.load("item_return-form") is None


def test_corrupt_memory_draft_is_logged_and_deleted(clock: FakeClock, caplog: pytest.LogCaptureFixture) -> None:
    repo = InMemoryDraftRepository(ttl_seconds=300, clock=clock)
    repo.raw["form"] = "{not json"
    with caplog.at_level(logging.WARNING, logger="storekeeper.client.drafts"):
        assert repo.load("form") is None
    assert "form" not in repo.raw
    assert "unreadable draft" in caplog.text


def test_wrong_shape_draft_is_discarded(clock: FakeClock) -> None:
    repo = InMemoryDraftRepository(ttl_seconds=300, clock=clock)
    repo.raw["form"] = '{"selected_approver_ids": "everyone"}'
    assert repo.load("form") is None
    assert "form" not in repo.raw


def test_corrupt_file_draft_is_deleted(tmp_path: Path, clock: FakeClock) -> None:
    repo = FileDraftRepository(tmp_path, ttl_seconds=300, clock=clock)
    (tmp_path / "form.json").write_text("[1, 2", encoding="utf-8")
    assert repo.load("form") is None
    assert not (tmp_path / "form.json").exists()


def test_file_repository_rejects_path_like_ids(tmp_path: Path, clock: FakeClock) -> None:
    repo = FileDraftRepository(tmp_path, ttl_seconds=300, clock=clock)
    with pytest.raises(ValueError, match="Invalid draft id"):
        repo.save("../escape", _draft())
