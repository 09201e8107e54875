from __future__ import annotations

from typing import TYPE_CHECKING

from storekeeper.models.enums import RequestKind, RequestStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from storekeeper.schemas.request import RequestSummaryResponse

SEARCH_FIELDS = ("team_leader_name", "team_leader_phone", "project_name", "created_by", "approver_names")


def _haystack(request: RequestSummaryResponse) -> list[str]:
    fields = [getattr(request, name) for name in SEARCH_FIELDS]
    if request.kind == RequestKind.ITEM_RETURN:
        fields.append(request.reason)
    return [value.lower() for value in fields if value]


def filter_requests(
    requests: Iterable[RequestSummaryResponse],
    status: RequestStatus | str | None = None,
    search: str | None = None,
) -> list[RequestSummaryResponse]:
    """Partition by exact status, then narrow by a case-insensitive substring.

    A blank search term applies no secondary filter. Input order is kept.
    """
    selected = list(requests)
    if status is not None:
        wanted = RequestStatus(status)
        selected = [r for r in selected if r.status == wanted]
    term = (search or "").strip().lower()
    if not term:
        return selected
    return [r for r in selected if any(term in value for value in _haystack(r))]
