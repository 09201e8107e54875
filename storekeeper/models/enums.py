from __future__ import annotations

import enum


class RequestStatus(enum.StrEnum):
    """State machine for material requests and item returns."""

    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    REJECTED = "rejected"


class RequestKind(enum.StrEnum):
    """Which workflow a request belongs to."""

    MATERIAL_REQUEST = "material_request"
    ITEM_RETURN = "item_return"


class DeploymentType(enum.StrEnum):
    """Purpose of a material request."""

    DEPLOYMENT = "Deployment"
    MAINTENANCE = "Maintenance"


class UserRole(enum.StrEnum):
    """Roles that gate what a user may do with requests and stock."""

    REQUESTER = "requester"
    APPROVER = "approver"
    ISSUER = "issuer"
    SUPERADMIN = "superadmin"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    CATEGORY = "CATEGORY"
    ITEM = "ITEM"
    ITEM_OUT = "ITEM_OUT"
    REQUEST = "REQUEST"
    USER = "USER"
    SUPERVISOR = "SUPERVISOR"
    SETTING = "SETTING"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    FINALIZE = "FINALIZE"
    ISSUE = "ISSUE"
