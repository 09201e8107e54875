from fastapi import APIRouter

from storekeeper.api.audit import audit_router
from storekeeper.api.categories import categories_router
from storekeeper.api.dashboard import dashboard_router
from storekeeper.api.items import items_out_router, items_router
from storekeeper.api.requests import requests_router
from storekeeper.api.settings import settings_router
from storekeeper.api.supervisors import supervisors_router
from storekeeper.api.users import approvers_router, users_router

api_router = APIRouter()
api_router.include_router(requests_router)
api_router.include_router(approvers_router)
api_router.include_router(items_router)
api_router.include_router(items_out_router)
api_router.include_router(categories_router)
api_router.include_router(dashboard_router)
api_router.include_router(users_router)
api_router.include_router(supervisors_router)
api_router.include_router(settings_router)
api_router.include_router(audit_router)
