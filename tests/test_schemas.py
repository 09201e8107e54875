"""Unit tests for the request payload schemas."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from storekeeper.models.enums import DeploymentType
from storekeeper.schemas.inventory import CreateItemPayload, IssueItemPayload
from storekeeper.schemas.request import (
    ApprovePayload,
    CreateRequestPayload,
    FinalizeItem,
    ItemReturnCreate,
    MaterialRequestCreate,
    MaterialRequestUpdate,
    ReturnedItemRow,
    UpdateRequestPayload,
)

_create: TypeAdapter[CreateRequestPayload] = TypeAdapter(CreateRequestPayload)
_update: TypeAdapter[UpdateRequestPayload] = TypeAdapter(UpdateRequestPayload)


def test_create_dispatches_material_request_on_kind() -> None:
    payload = _create.validate_python({"kind": "material_request", "items": [{"name": "Cable", "requested": 3}]})
    assert isinstance(payload, MaterialRequestCreate)
    assert payload.deployment_type == DeploymentType.DEPLOYMENT
    assert payload.items[0].quantity == 3


def test_create_dispatches_item_return_on_kind() -> None:
    payload = _create.validate_python({"kind": "item_return", "items": [{"name": "Cable", "returned": 2}]})
    assert isinstance(payload, ItemReturnCreate)
    assert isinstance(payload.items[0], ReturnedItemRow)
    assert payload.items[0].quantity == 2


def test_create_rejects_unknown_kind() -> None:
    with pytest.raises(ValidationError):
        _create.validate_python({"kind": "transfer"})


def test_blank_create_payload_is_accepted_for_server_side_checks() -> None:
    payload = _create.validate_python({"kind": "material_request"})
    assert payload.created_by == ""
    assert payload.approver_ids == []


def test_update_ignores_fields_that_cannot_change() -> None:
    payload = _update.validate_python(
        {
            "kind": "material_request",
            "team_leader_name": "Kofi",
            "project_name": "FTTH",
            "location": "Osu",
            "deployment_type": "Maintenance",
            "items": [],
            "created_by": "Mallory",
            "release_by": "Mallory",
            "received_by": "Mallory",
            "status": "completed",
        }
    )
    assert isinstance(payload, MaterialRequestUpdate)
    dumped = payload.model_dump()
    assert "created_by" not in dumped
    assert "release_by" not in dumped
    assert "received_by" not in dumped
    assert "status" not in dumped


def test_approve_requires_name() -> None:
    with pytest.raises(ValidationError):
        ApprovePayload(approver_name="")


def test_finalize_item_rejects_negative_quantity() -> None:
    with pytest.raises(ValidationError):
        FinalizeItem(item_id=1, quantity_received=-1)


def test_item_payload_bounds() -> None:
    with pytest.raises(ValidationError):
        CreateItemPayload(name="Cable", quantity=-1)
    with pytest.raises(ValidationError):
        IssueItemPayload(person_name="Kofi", item_id=1, quantity=0)
