from storekeeper.client.api import StoreError, StorekeeperClient
from storekeeper.client.approvers import ApproverSelection
from storekeeper.client.details import RequestDetailController
from storekeeper.client.drafts import Draft, DraftRepository, FileDraftRepository, InMemoryDraftRepository
from storekeeper.client.filtering import filter_requests
from storekeeper.client.forms import RequestFormController
from storekeeper.client.polling import RefreshPoller, dashboard_poller, request_list_poller

__all__ = [
    "ApproverSelection",
    "Draft",
    "DraftRepository",
    "FileDraftRepository",
    "InMemoryDraftRepository",
    "RefreshPoller",
    "RequestDetailController",
    "RequestFormController",
    "StoreError",
    "StorekeeperClient",
    "dashboard_poller",
    "filter_requests",
    "request_list_poller",
]
