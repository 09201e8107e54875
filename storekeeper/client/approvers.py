from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from storekeeper.schemas.request import ApproverResponse


class ApproverSelection:
    """Which approvers a new request will be sent to.

    Every time the approver list is (re)loaded the selection resets to all of
    them. ``toggle_all`` compares sizes on each call rather than keeping an
    "all selected" flag.
    """

    def __init__(self, approvers: Iterable[ApproverResponse] = ()) -> None:
        self._approvers: list[ApproverResponse] = []
        self._selected: set[int] = set()
        self.load(approvers)

    def load(self, approvers: Iterable[ApproverResponse]) -> None:
        self._approvers = list(approvers)
        self.select_all()

    @property
    def approvers(self) -> list[ApproverResponse]:
        return list(self._approvers)

    @property
    def selected_ids(self) -> list[int]:
        """Selected ids in approver list order."""
        return [a.id for a in self._approvers if a.id in self._selected]

    @property
    def is_all_selected(self) -> bool:
        return len(self._selected) == len(self._approvers)

    def is_selected(self, approver_id: int) -> bool:
        return approver_id in self._selected

    def toggle(self, approver_id: int) -> None:
        if approver_id in self._selected:
            self._selected.discard(approver_id)
        elif any(a.id == approver_id for a in self._approvers):
            self._selected.add(approver_id)

    def toggle_all(self) -> None:
        if self.is_all_selected:
            self._selected.clear()
        else:
            self.select_all()

    def select_all(self) -> None:
        self._selected = {a.id for a in self._approvers}

    def select(self, approver_ids: Iterable[int]) -> None:
        """Replace the selection, ignoring ids that are not known approvers."""
        known = {a.id for a in self._approvers}
        self._selected = {i for i in approver_ids if i in known}
