from sqlmodel import SQLModel

from storekeeper.models.admin import AppSetting, Supervisor
from storekeeper.models.audit import AuditLog
from storekeeper.models.base import IntIdBase, TimestampMixin, UpdatedAtMixin
from storekeeper.models.enums import (
    AuditAction,
    AuditEntityType,
    DeploymentType,
    RequestKind,
    RequestStatus,
    UserRole,
)
from storekeeper.models.inventory import Category, Item, ItemOut
from storekeeper.models.request import Approval, MaterialRequest, Rejection, RequestApprover, RequestItem
from storekeeper.models.user import User

__all__ = [
    "AppSetting",
    "Approval",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "Category",
    "DeploymentType",
    "IntIdBase",
    "Item",
    "ItemOut",
    "MaterialRequest",
    "Rejection",
    "RequestApprover",
    "RequestItem",
    "RequestKind",
    "RequestStatus",
    "SQLModel",
    "Supervisor",
    "TimestampMixin",
    "UpdatedAtMixin",
    "User",
]
