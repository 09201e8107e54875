"""Short-lived storage for unsubmitted request forms.

A draft is kept as raw JSON text under a draft id. Drafts older than the TTL
are dropped on read, and so is anything that no longer parses: a broken draft
is logged and deleted, never handed back to the form.
"""

from __future__ import annotations

import logging
import re
import time
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, Field, ValidationError

from storekeeper.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)

_DRAFT_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class Draft(BaseModel):
    """Snapshot of a request form. ``timestamp`` is epoch milliseconds."""

    form_data: dict[str, Any] = Field(default_factory=dict)
    selected_approver_ids: list[int] = Field(default_factory=list)
    selected_items: list[dict[str, Any]] = Field(default_factory=list)
    timestamp: int = 0


class DraftRepository(Protocol):
    def save(self, draft_id: str, draft: Draft) -> Draft: ...

    def load(self, draft_id: str) -> Draft | None: ...

    def delete(self, draft_id: str) -> None: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class _RawDraftRepository:
    """Shared save/load logic. Subclasses only move text in and out."""

    def __init__(self, *, ttl_seconds: float | None = None, clock: Callable[[], int] = _now_ms) -> None:
        if ttl_seconds is None:
            ttl_seconds = get_settings().draft_ttl_seconds
        self.ttl_ms = int(ttl_seconds * 1000)
        self._clock = clock

    def _read(self, draft_id: str) -> str | None:
        raise NotImplementedError

    def _write(self, draft_id: str, raw: str) -> None:
        raise NotImplementedError

    def _remove(self, draft_id: str) -> None:
        raise NotImplementedError

    def save(self, draft_id: str, draft: Draft) -> Draft:
        """Overwrite the draft, stamping it with the current time."""
        stamped = draft.model_copy(update={"timestamp": self._clock()})
        self._write(draft_id, stamped.model_dump_json())
        return stamped

    def load(self, draft_id: str) -> Draft | None:
        raw = self._read(draft_id)
        if raw is None:
            return None
        try:
            draft = Draft.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable draft %r", draft_id)
            self._remove(draft_id)
            return None
        if self._clock() - draft.timestamp >= self.ttl_ms:
            logger.debug("Draft %r expired", draft_id)
            self._remove(draft_id)
            return None
        return draft

    def delete(self, draft_id: str) -> None:
        self._remove(draft_id)


class InMemoryDraftRepository(_RawDraftRepository):
    def __init__(self, *, ttl_seconds: float | None = None, clock: Callable[[], int] = _now_ms) -> None:
        super().__init__(ttl_seconds=ttl_seconds, clock=clock)
        self.raw: dict[str, str] = {}

    def _read(self, draft_id: str) -> str | None:
        return self.raw.get(draft_id)

    def _write(self, draft_id: str, raw: str) -> None:
        self.raw[draft_id] = raw

    def _remove(self, draft_id: str) -> None:
        self.raw.pop(draft_id, None)


class FileDraftRepository(_RawDraftRepository):
    """One ``<draft_id>.json`` file per draft under ``directory``."""

    def __init__(
        self,
        directory: Path,
        *,
        ttl_seconds: float | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        super().__init__(ttl_seconds=ttl_seconds, clock=clock)
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, draft_id: str) -> Path:
        if not _DRAFT_ID.match(draft_id):
            raise ValueError(f"Invalid draft id: {draft_id!r}")
        return self.directory / f"{draft_id}.json"

    def _read(self, draft_id: str) -> str | None:
        path = self._path(draft_id)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError:
            # Undecodable bytes are treated like malformed JSON.
            return ""

    def _write(self, draft_id: str, raw: str) -> None:
        self._path(draft_id).write_text(raw, encoding="utf-8")

    def _remove(self, draft_id: str) -> None:
        self._path(draft_id).unlink(missing_ok=True)
