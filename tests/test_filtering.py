from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from storekeeper.client.filtering import filter_requests
from storekeeper.models.enums import RequestKind, RequestStatus
from storekeeper.schemas.request import RequestSummaryResponse


def _summary(request_id: int, **overrides: Any) -> RequestSummaryResponse:
    data: dict[str, Any] = {
        "id": request_id,
        "kind": RequestKind.MATERIAL_REQUEST,
        "created_by": "Ray Owusu",
        "team_leader_name": "Kofi Asante",
        "team_leader_phone": "0244000111",
        "project_name": "Airport FTTH",
        "isp_name": None,
        "location": "Airport",
        "deployment_type": "Deployment",
        "reason": None,
        "release_by": None,
        "received_by": "Kofi Asante",
        "status": RequestStatus.PENDING,
        "created_at": datetime(2026, 1, 1, tzinfo=UTC),
        "updated_at": None,
        "approved_at": None,
        "completed_at": None,
        "rejected_at": None,
        "approver_names": "Grace Okafor, Daniel Mensah",
    }
    data.update(overrides)
    return RequestSummaryResponse.model_validate(data)


REQUESTS = [
    _summary(1),
    _summary(2, status=RequestStatus.APPROVED, project_name="Osu Maintenance", team_leader_name="Esi"),
    _summary(3, project_name="Metro Backbone", team_leader_phone="0200999888", approver_names="Yaw Tetteh"),
    _summary(
        4,
        kind=RequestKind.ITEM_RETURN,
        team_leader_name=None,
        team_leader_phone=None,
        project_name="Tema",
        reason="Leftover splice closures",
        approver_names=None,
    ),
]


def test_status_partition_is_exact() -> None:
    assert [r.id for r in filter_requests(REQUESTS, RequestStatus.PENDING)] == [1, 3, 4]
    assert [r.id for r in filter_requests(REQUESTS, "approved")] == [2]
    assert filter_requests(REQUESTS, RequestStatus.COMPLETED) == []


def test_blank_search_applies_no_filter() -> None:
    assert [r.id for r in filter_requests(REQUESTS, RequestStatus.PENDING, "   ")] == [1, 3, 4]
    assert [r.id for r in filter_requests(REQUESTS, None, "")] == [1, 2, 3, 4]


def test_search_is_case_insensitive_substring() -> None:
    assert [r.id for r in filter_requests(REQUESTS, RequestStatus.PENDING, "metro")] == [3]
    assert [r.id for r in filter_requests(REQUESTS, None, "AIRPORT")] == [1]


def test_search_covers_phone_creator_and_approvers() -> None:
    assert [r.id for r in filter_requests(REQUESTS, None, "0200")] == [3]
    assert [r.id for r in filter_requests(REQUESTS, None, "owusu")] == [1, 2, 3, 4]
    assert [r.id for r in filter_requests(REQUESTS, None, "tetteh")] == [3]


def test_search_matches_reason_on_returns_only() -> None:
    assert [r.id for r in filter_requests(REQUESTS, None, "splice")] == [4]


def test_search_result_is_subset_of_status_partition() -> None:
    pending = filter_requests(REQUESTS, RequestStatus.PENDING)
    searched = filter_requests(REQUESTS, RequestStatus.PENDING, "kofi")
    assert all(r in pending for r in searched)
    assert [r.id for r in searched] == [1, 3]
