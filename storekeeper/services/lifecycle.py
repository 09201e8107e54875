"""Request lifecycle rules shared by the API and the client controllers.

Nothing in here touches the database or the network, so the same checks run
in the browser-side form flow and again on the server.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from storekeeper.exceptions import InvalidTransitionError, MissingFieldsError, NoApproverError, NoItemsError
from storekeeper.models.enums import RequestKind, RequestStatus
from storekeeper.schemas.request import ItemReturnCreate, ItemReturnUpdate, MaterialRequestCreate, MaterialRequestUpdate

if TYPE_CHECKING:
    from collections.abc import Iterable

    from storekeeper.schemas.request import ItemRow

RowT = TypeVar("RowT", bound="ItemRow")
CreateT = TypeVar("CreateT", MaterialRequestCreate, ItemReturnCreate)

REQUIRED_FIELDS: dict[RequestKind, tuple[str, ...]] = {
    RequestKind.MATERIAL_REQUEST: ("created_by", "team_leader_name", "project_name", "location", "received_by"),
    RequestKind.ITEM_RETURN: ("created_by", "project_name", "location", "reason"),
}

# Fields that must stay filled when a pending request is edited.
EDIT_REQUIRED_FIELDS: dict[RequestKind, tuple[str, ...]] = {
    RequestKind.MATERIAL_REQUEST: ("team_leader_name", "project_name", "location"),
    RequestKind.ITEM_RETURN: ("project_name", "location", "reason"),
}

TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED}),
    RequestStatus.APPROVED: frozenset({RequestStatus.COMPLETED, RequestStatus.REJECTED}),
    RequestStatus.COMPLETED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
}


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------


def can_transition(current: RequestStatus | str, target: RequestStatus | str) -> bool:
    """Return True if a request may move from ``current`` to ``target``."""
    return RequestStatus(target) in TRANSITIONS[RequestStatus(current)]


def ensure_transition(current: RequestStatus | str, target: RequestStatus | str) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        raise InvalidTransitionError(f"Cannot move request from {RequestStatus(current)} to {RequestStatus(target)}")


def is_editable(status: RequestStatus | str) -> bool:
    """Only pending requests can be edited."""
    return RequestStatus(status) == RequestStatus.PENDING


def ensure_editable(status: RequestStatus | str) -> None:
    if not is_editable(status):
        raise InvalidTransitionError("Only pending requests can be edited")


# ---------------------------------------------------------------------------
# Submission validation
# ---------------------------------------------------------------------------


def filter_item_rows(rows: Iterable[RowT]) -> list[RowT]:
    """Drop rows with a blank name or a non-positive quantity, keeping order."""
    return [row for row in rows if row.name.strip() and row.quantity > 0]


def missing_fields(payload: MaterialRequestCreate | ItemReturnCreate) -> list[str]:
    """Names of required fields that are blank, in declaration order."""
    return _blank(payload, REQUIRED_FIELDS[RequestKind(payload.kind)])


def _blank(payload: object, required: tuple[str, ...]) -> list[str]:
    return [name for name in required if not (getattr(payload, name) or "").strip()]


def validate_submission(payload: CreateT) -> CreateT:
    """Check a new request and return a copy holding only the usable item rows.

    Order matters: blank required fields are reported first, then an empty
    approver selection, then the absence of valid item rows.
    """
    missing = missing_fields(payload)
    if missing:
        raise MissingFieldsError(missing)
    if not payload.approver_ids:
        raise NoApproverError
    items = filter_item_rows(payload.items)
    if not items:
        raise NoItemsError
    return payload.model_copy(update={"items": items, "approver_ids": _unique(payload.approver_ids)})


def validate_edit(payload: MaterialRequestUpdate | ItemReturnUpdate) -> list[ItemRow]:
    """Check an edit of a pending request and return its usable item rows."""
    missing = _blank(payload, EDIT_REQUIRED_FIELDS[RequestKind(payload.kind)])
    if missing:
        raise MissingFieldsError(missing)
    items: list[ItemRow] = filter_item_rows(payload.items)
    if not items:
        raise NoItemsError
    return items


def _unique(ids: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(ids))
