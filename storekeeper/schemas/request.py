# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from storekeeper.models.enums import DeploymentType, RequestKind, RequestStatus

# ---------------------------------------------------------------------------
# Item rows
# ---------------------------------------------------------------------------


class RequestedItemRow(BaseModel):
    """A material request line as typed into the form."""

    name: str = ""
    requested: int = 0

    @property
    def quantity(self) -> int:
        return self.requested


class ReturnedItemRow(BaseModel):
    """An item return line as typed into the form."""

    name: str = ""
    returned: int = 0

    @property
    def quantity(self) -> int:
        return self.returned


ItemRow = RequestedItemRow | ReturnedItemRow

# ---------------------------------------------------------------------------
# Create payloads (discriminated on ``kind``)
# ---------------------------------------------------------------------------


class MaterialRequestCreate(BaseModel):
    """Request body for a new material request."""

    kind: Literal["material_request"] = "material_request"
    created_by: str = ""
    team_leader_name: str = ""
    team_leader_phone: str | None = None
    project_name: str = ""
    isp_name: str | None = None
    location: str = ""
    deployment_type: DeploymentType = DeploymentType.DEPLOYMENT
    received_by: str = ""
    items: list[RequestedItemRow] = []
    approver_ids: list[int] = []


class ItemReturnCreate(BaseModel):
    """Request body for a new item return."""

    kind: Literal["item_return"] = "item_return"
    created_by: str = ""
    project_name: str = ""
    location: str = ""
    reason: str = ""
    items: list[ReturnedItemRow] = []
    approver_ids: list[int] = []


CreateRequestPayload = Annotated[MaterialRequestCreate | ItemReturnCreate, Field(discriminator="kind")]

# ---------------------------------------------------------------------------
# Update payloads. Only fields editable while pending are accepted; anything
# else (created_by, release_by, received_by, status) is dropped.
# ---------------------------------------------------------------------------


class MaterialRequestUpdate(BaseModel):
    """Editable fields of a pending material request."""

    model_config = ConfigDict(extra="ignore")

    kind: Literal["material_request"] = "material_request"
    team_leader_name: str
    team_leader_phone: str | None = None
    project_name: str
    isp_name: str | None = None
    location: str
    deployment_type: DeploymentType
    items: list[RequestedItemRow]


class ItemReturnUpdate(BaseModel):
    """Editable fields of a pending item return."""

    model_config = ConfigDict(extra="ignore")

    kind: Literal["item_return"] = "item_return"
    project_name: str
    location: str
    reason: str
    items: list[ReturnedItemRow]


UpdateRequestPayload = Annotated[MaterialRequestUpdate | ItemReturnUpdate, Field(discriminator="kind")]

# ---------------------------------------------------------------------------
# Decision payloads
# ---------------------------------------------------------------------------


class ApprovePayload(BaseModel):
    """Request body for approving a request."""

    approver_name: str = Field(min_length=1, max_length=255)
    signature: str | None = None


class RejectPayload(BaseModel):
    """Request body for rejecting a request."""

    rejector_name: str = ""
    reason: str = ""


class FinalizeItem(BaseModel):
    """Quantities actually handed over (or taken back) for one line."""

    item_id: int
    quantity_received: int = Field(default=0, ge=0)
    quantity_returned: int | None = Field(default=None, ge=0)


class FinalizePayload(BaseModel):
    """Request body for issuing an approved request."""

    release_by: str = Field(min_length=1, max_length=255)
    items: list[FinalizeItem] = []


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ApproverResponse(BaseModel):
    """An approver a request can be sent to."""

    id: int
    full_name: str


class RequestItemResponse(BaseModel):
    """A request line with its catalog item name and current stock."""

    id: int
    item_id: int
    item_name: str
    position: int
    quantity_requested: int | None
    quantity_received: int | None
    quantity_returned: int | None
    current_stock: int


class ApprovalResponse(BaseModel):
    id: int
    approver_name: str
    signature: str | None
    created_at: datetime


class RejectionResponse(BaseModel):
    id: int
    rejector_name: str
    reason: str
    created_at: datetime


class RequestSummaryResponse(BaseModel):
    """A request as shown in list views."""

    id: int
    kind: RequestKind
    created_by: str
    team_leader_name: str | None
    team_leader_phone: str | None
    project_name: str
    isp_name: str | None
    location: str
    deployment_type: DeploymentType | None
    reason: str | None
    release_by: str | None
    received_by: str | None
    status: RequestStatus
    created_at: datetime
    updated_at: datetime | None
    approved_at: datetime | None
    completed_at: datetime | None
    rejected_at: datetime | None
    item_count: int = 0
    approver_names: str | None = None
    reject_reason: str | None = None


class RequestDetailResponse(RequestSummaryResponse):
    """A single request with its lines, decisions and approvers."""

    items: list[RequestItemResponse] = []
    approvals: list[ApprovalResponse] = []
    rejections: list[RejectionResponse] = []
    approvers: list[ApproverResponse] = []
    can_edit: bool = False


class RequestListResponse(BaseModel):
    """Paginated list of requests."""

    items: list[RequestSummaryResponse]
    total: int
