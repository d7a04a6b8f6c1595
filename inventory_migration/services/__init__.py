"""Service layer: transport, authentication, snapshots and preflight checks."""

from .api_client import ApiClient
from .auth import fetch_token
from .snapshot_store import SnapshotStore
from .preflight import PreflightChecker

__all__ = [
    "ApiClient",
    "fetch_token",
    "SnapshotStore",
    "PreflightChecker",
]
