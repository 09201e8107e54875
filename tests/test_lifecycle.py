"""Unit tests for the pure request lifecycle rules."""

from __future__ import annotations

import pytest

from storekeeper.exceptions import InvalidTransitionError, MissingFieldsError, NoApproverError, NoItemsError
from storekeeper.models.enums import RequestStatus
from storekeeper.schemas.request import (
    ItemReturnCreate,
    ItemReturnUpdate,
    MaterialRequestCreate,
    MaterialRequestUpdate,
    RequestedItemRow,
    ReturnedItemRow,
)
from storekeeper.services import lifecycle


def _material(**overrides: object) -> MaterialRequestCreate:
    data: dict[str, object] = {
        "created_by": "Ray",
        "team_leader_name": "Kofi",
        "project_name": "FTTH",
        "location": "Osu",
        "received_by": "Kofi",
        "items": [RequestedItemRow(name="Drop cable", requested=10)],
        "approver_ids": [1, 2],
    }
    data.update(overrides)
    return MaterialRequestCreate.model_validate(data)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("current", "target", "allowed"),
    [
        (RequestStatus.PENDING, RequestStatus.APPROVED, True),
        (RequestStatus.PENDING, RequestStatus.REJECTED, True),
        (RequestStatus.APPROVED, RequestStatus.COMPLETED, True),
        (RequestStatus.APPROVED, RequestStatus.REJECTED, True),
        (RequestStatus.PENDING, RequestStatus.COMPLETED, False),
        (RequestStatus.COMPLETED, RequestStatus.REJECTED, False),
        (RequestStatus.REJECTED, RequestStatus.APPROVED, False),
        (RequestStatus.APPROVED, RequestStatus.PENDING, False),
    ],
)
def test_transitions(current: RequestStatus, target: RequestStatus, allowed: bool) -> None:
    assert lifecycle.can_transition(current, target) is allowed


def test_ensure_transition_raises_409() -> None:
    with pytest.raises(InvalidTransitionError) as exc_info:
        lifecycle.ensure_transition("completed", "approved")
    assert exc_info.value.status_code == 409


def test_only_pending_is_editable() -> None:
    assert lifecycle.is_editable("pending")
    for status in ("approved", "completed", "rejected"):
        assert not lifecycle.is_editable(status)
        with pytest.raises(InvalidTransitionError):
            lifecycle.ensure_editable(status)


# ---------------------------------------------------------------------------
# Submission validation
# ---------------------------------------------------------------------------


def test_valid_submission_passes() -> None:
    payload = lifecycle.validate_submission(_material())
    assert payload.approver_ids == [1, 2]
    assert [row.name for row in payload.items] == ["Drop cable"]


def test_missing_fields_reported_in_order() -> None:
    with pytest.raises(MissingFieldsError) as exc_info:
        lifecycle.validate_submission(_material(created_by="", location="   ", received_by=""))
    assert exc_info.value.fields == ["created_by", "location", "received_by"]
    assert exc_info.value.status_code == 422


def test_missing_fields_checked_before_approvers_and_items() -> None:
    with pytest.raises(MissingFieldsError):
        lifecycle.validate_submission(_material(project_name="", approver_ids=[], items=[]))


def test_no_approver_checked_before_items() -> None:
    with pytest.raises(NoApproverError):
        lifecycle.validate_submission(_material(approver_ids=[], items=[]))


def test_rows_without_name_or_quantity_are_dropped() -> None:
    payload = lifecycle.validate_submission(
        _material(
            items=[
                RequestedItemRow(name="", requested=4),
                RequestedItemRow(name="Pigtail", requested=0),
                RequestedItemRow(name="Closure", requested=-2),
                RequestedItemRow(name="Drop cable", requested=5),
            ]
        )
    )
    assert [(row.name, row.requested) for row in payload.items] == [("Drop cable", 5)]


def test_all_rows_invalid_raises_no_items() -> None:
    with pytest.raises(NoItemsError):
        lifecycle.validate_submission(_material(items=[RequestedItemRow(name="  ", requested=3)]))


def test_duplicate_approvers_collapse() -> None:
    assert lifecycle.validate_submission(_material(approver_ids=[3, 1, 3])).approver_ids == [3, 1]


def test_item_return_requires_reason_not_team_leader() -> None:
    payload = ItemReturnCreate(
        created_by="Ray",
        project_name="FTTH",
        location="Osu",
        reason="",
        items=[ReturnedItemRow(name="Closure", returned=1)],
        approver_ids=[1],
    )
    assert lifecycle.missing_fields(payload) == ["reason"]


# ---------------------------------------------------------------------------
# Edit validation
# ---------------------------------------------------------------------------


def test_validate_edit_returns_usable_rows() -> None:
    update = MaterialRequestUpdate(
        team_leader_name="Kofi",
        project_name="FTTH",
        location="Osu",
        deployment_type="Maintenance",
        items=[RequestedItemRow(name="Pigtail", requested=0), RequestedItemRow(name="Cable", requested=2)],
    )
    assert [row.name for row in lifecycle.validate_edit(update)] == ["Cable"]


def test_validate_edit_rejects_blank_fields_and_empty_items() -> None:
    with pytest.raises(MissingFieldsError) as exc_info:
        lifecycle.validate_edit(ItemReturnUpdate(project_name="FTTH", location="", reason="", items=[]))
    assert exc_info.value.fields == ["location", "reason"]

    with pytest.raises(NoItemsError):
        lifecycle.validate_edit(ItemReturnUpdate(project_name="FTTH", location="Osu", reason="Spare", items=[]))
