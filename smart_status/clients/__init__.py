from smart_status.clients.base import (
    ApprovalEndpoint,
    BookingNotFoundError,
    EndpointError,
    Messenger,
    NotAuthenticatedError,
    RecordFetcher,
    RecordStore,
    RecordStoreError,
    SmartStatusError,
)
from smart_status.clients.fetcher import StoreSnapshotFetcher
from smart_status.clients.http_api import DashboardApiClient
from smart_status.clients.memory_store import InMemoryRecordStore

__all__ = [
    "StoreSnapshotFetcher",
    "InMemoryRecordStore",
    "DashboardApiClient",
    "RecordStore",
    "RecordFetcher",
    "ApprovalEndpoint",
    "Messenger",
    "SmartStatusError",
    "BookingNotFoundError",
    "RecordStoreError",
    "NotAuthenticatedError",
    "EndpointError",
]
