"""Controller behind the request detail view and its edit mode."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from storekeeper.exceptions import InvalidTransitionError
from storekeeper.models.enums import RequestKind
from storekeeper.schemas.request import ItemReturnUpdate, MaterialRequestUpdate, RequestedItemRow, ReturnedItemRow
from storekeeper.services import lifecycle

if TYPE_CHECKING:
    from storekeeper.client.api import StorekeeperClient
    from storekeeper.schemas.inventory import ItemResponse
    from storekeeper.schemas.request import ItemRow, RequestDetailResponse

logger = logging.getLogger(__name__)

EDITABLE_FIELDS: dict[RequestKind, tuple[str, ...]] = {
    RequestKind.MATERIAL_REQUEST: (
        "team_leader_name",
        "team_leader_phone",
        "project_name",
        "isp_name",
        "location",
        "deployment_type",
    ),
    RequestKind.ITEM_RETURN: ("project_name", "location", "reason"),
}


class RequestDetailController:
    """Shows one request and edits it through a shadow copy.

    Edits never touch ``request`` directly: ``save()`` sends the shadow copy
    and then reloads the record from the store.
    """

    def __init__(self, client: StorekeeperClient) -> None:
        self.client = client
        self.request: RequestDetailResponse | None = None
        self.catalog: list[ItemResponse] = []
        self.edit_fields: dict[str, Any] | None = None
        self.edit_items: list[ItemRow] | None = None

    @property
    def can_edit(self) -> bool:
        return self.request is not None and lifecycle.is_editable(self.request.status)

    @property
    def is_editing(self) -> bool:
        return self.edit_fields is not None

    def _loaded(self) -> RequestDetailResponse:
        if self.request is None:
            raise RuntimeError("No request loaded")
        return self.request

    async def load(self, request_id: int) -> RequestDetailResponse:
        self.request = await self.client.get_request_details(request_id)
        self.catalog = await self.client.get_items()
        return self.request

    def begin_edit(self) -> None:
        request = self._loaded()
        lifecycle.ensure_editable(request.status)
        kind = RequestKind(request.kind)
        self.edit_fields = {name: getattr(request, name) for name in EDITABLE_FIELDS[kind]}
        if kind == RequestKind.ITEM_RETURN:
            self.edit_items = [
                ReturnedItemRow(name=line.item_name, returned=line.quantity_returned or 0) for line in request.items
            ]
        else:
            self.edit_items = [
                RequestedItemRow(name=line.item_name, requested=line.quantity_requested or 0)
                for line in request.items
            ]

    def _editing(self) -> tuple[dict[str, Any], list[ItemRow]]:
        if self.edit_fields is None or self.edit_items is None:
            raise InvalidTransitionError("Not editing")
        return self.edit_fields, self.edit_items

    def set_field(self, name: str, value: Any) -> None:
        fields, _ = self._editing()
        if name not in fields:
            raise KeyError(name)
        fields[name] = value

    def set_item(self, index: int, *, name: str | None = None, quantity: int | None = None) -> None:
        _, items = self._editing()
        row = items[index]
        updated: dict[str, Any] = {"name": row.name if name is None else name}
        if isinstance(row, ReturnedItemRow):
            updated["returned"] = row.returned if quantity is None else quantity
        else:
            updated["requested"] = row.requested if quantity is None else quantity
        items[index] = row.model_copy(update=updated)

    def add_item(self) -> None:
        _, items = self._editing()
        if RequestKind(self._loaded().kind) == RequestKind.ITEM_RETURN:
            items.append(ReturnedItemRow())
        else:
            items.append(RequestedItemRow())

    def remove_item(self, index: int) -> None:
        _, items = self._editing()
        del items[index]

    def build_update(self) -> MaterialRequestUpdate | ItemReturnUpdate:
        fields, items = self._editing()
        data = {**fields, "items": items}
        if RequestKind(self._loaded().kind) == RequestKind.ITEM_RETURN:
            return ItemReturnUpdate.model_validate(data)
        return MaterialRequestUpdate.model_validate(data)

    async def save(self) -> RequestDetailResponse:
        """Send the shadow copy, then reload the full record."""
        request = self._loaded()
        lifecycle.ensure_editable(request.status)
        payload = self.build_update()
        lifecycle.validate_edit(payload)
        await self.client.update_request(request.id, payload)
        self.cancel()
        logger.info("Saved changes to request %d", request.id)
        return await self.load(request.id)

    def cancel(self) -> None:
        self.edit_fields = None
        self.edit_items = None
