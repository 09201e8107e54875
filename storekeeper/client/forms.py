"""Controller behind the "new material request" and "new item return" forms."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from storekeeper.client.api import StoreError
from storekeeper.client.approvers import ApproverSelection
from storekeeper.client.drafts import Draft
from storekeeper.models.enums import DeploymentType, RequestKind
from storekeeper.schemas.request import ItemReturnCreate, MaterialRequestCreate, RequestedItemRow, ReturnedItemRow
from storekeeper.services import lifecycle

if TYPE_CHECKING:
    from storekeeper.client.api import StorekeeperClient
    from storekeeper.client.drafts import DraftRepository
    from storekeeper.schemas.request import ItemRow, RequestDetailResponse

logger = logging.getLogger(__name__)

FORM_FIELDS: dict[RequestKind, dict[str, str]] = {
    RequestKind.MATERIAL_REQUEST: {
        "created_by": "",
        "team_leader_name": "",
        "team_leader_phone": "",
        "project_name": "",
        "isp_name": "",
        "location": "",
        "deployment_type": DeploymentType.DEPLOYMENT.value,
        "received_by": "",
    },
    RequestKind.ITEM_RETURN: {
        "created_by": "",
        "project_name": "",
        "location": "",
        "reason": "",
    },
}


class RequestFormController:
    """Holds the form state and keeps a draft of it after every change.

    Call ``load_approvers()`` before ``restore()`` so a restored selection is
    applied on top of the freshly loaded approver list.
    """

    def __init__(
        self,
        client: StorekeeperClient,
        drafts: DraftRepository,
        *,
        kind: RequestKind = RequestKind.MATERIAL_REQUEST,
        draft_id: str | None = None,
    ) -> None:
        self.client = client
        self.drafts = drafts
        self.kind = kind
        self.draft_id = draft_id or f"{kind.value}-form"
        self.approvers = ApproverSelection()
        self.fields: dict[str, str] = dict(FORM_FIELDS[kind])
        self.items: list[ItemRow] = [self._new_row()]

    def _new_row(self, name: str = "", quantity: int = 0) -> ItemRow:
        if self.kind == RequestKind.ITEM_RETURN:
            return ReturnedItemRow(name=name, returned=quantity)
        return RequestedItemRow(name=name, requested=quantity)

    # -- draft --------------------------------------------------------------

    def _save_draft(self) -> None:
        self.drafts.save(
            self.draft_id,
            Draft(
                form_data=dict(self.fields),
                selected_approver_ids=self.approvers.selected_ids,
                selected_items=[row.model_dump() for row in self.items],
            ),
        )

    def restore(self) -> bool:
        """Load a live draft into the form. Returns False when there is none."""
        draft = self.drafts.load(self.draft_id)
        if draft is None:
            return False
        row_type = ReturnedItemRow if self.kind == RequestKind.ITEM_RETURN else RequestedItemRow
        try:
            rows: list[ItemRow] = [row_type.model_validate(row) for row in draft.selected_items]
        except ValidationError:
            logger.warning("Draft %r has unusable item rows, discarding it", self.draft_id)
            self.drafts.delete(self.draft_id)
            return False
        defaults = FORM_FIELDS[self.kind]
        self.fields = {name: str(draft.form_data.get(name, default) or "") for name, default in defaults.items()}
        self.items = rows or [self._new_row()]
        self.approvers.select(draft.selected_approver_ids)
        return True

    # -- edits --------------------------------------------------------------

    async def load_approvers(self) -> None:
        self.approvers.load(await self.client.get_approvers())

    def set_field(self, name: str, value: str) -> None:
        if name not in self.fields:
            raise KeyError(name)
        self.fields[name] = value
        self._save_draft()

    def add_item(self) -> None:
        self.items.append(self._new_row())
        self._save_draft()

    def set_item(self, index: int, *, name: str | None = None, quantity: int | None = None) -> None:
        row = self.items[index]
        self.items[index] = self._new_row(
            name=row.name if name is None else name,
            quantity=row.quantity if quantity is None else quantity,
        )
        self._save_draft()

    def remove_item(self, index: int) -> None:
        del self.items[index]
        if not self.items:
            self.items.append(self._new_row())
        self._save_draft()

    def toggle_approver(self, approver_id: int) -> None:
        self.approvers.toggle(approver_id)
        self._save_draft()

    def toggle_all_approvers(self) -> None:
        self.approvers.toggle_all()
        self._save_draft()

    # -- submit -------------------------------------------------------------

    def build_payload(self) -> MaterialRequestCreate | ItemReturnCreate:
        data: dict[str, Any] = {**self.fields, "items": self.items, "approver_ids": self.approvers.selected_ids}
        if self.kind == RequestKind.ITEM_RETURN:
            return ItemReturnCreate.model_validate(data)
        for optional in ("team_leader_phone", "isp_name"):
            data[optional] = data[optional] or None
        if not data["deployment_type"]:
            del data["deployment_type"]
        return MaterialRequestCreate.model_validate(data)

    async def submit(self) -> RequestDetailResponse:
        """Validate locally, then create the request.

        Validation errors are raised before anything is sent. If the store
        rejects the request the ``StoreError`` propagates and the form and its
        draft are left as they were.
        """
        payload = lifecycle.validate_submission(self.build_payload())
        try:
            created = await self.client.create_request(payload)
        except StoreError as exc:
            logger.error("Submitting %s failed: %s", self.kind.value, exc.message)
            raise
        self.drafts.delete(self.draft_id)
        self.reset()
        logger.info("Submitted %s %d", self.kind.value, created.id)
        return created

    def reset(self) -> None:
        """Back to defaults with every approver selected. Does not write a draft."""
        self.fields = dict(FORM_FIELDS[self.kind])
        self.items = [self._new_row()]
        self.approvers.select_all()
