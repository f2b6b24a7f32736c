"""tokenview - Async live token view with snapshot + push-stream reconciliation."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tokenview")
except PackageNotFoundError:
    __version__ = "0+local"
from tokenview.config import TokenViewConfig
from tokenview.exceptions import (
    TokenViewConfigError,
    TokenViewError,
    TokenViewPayloadError,
    TokenViewTransportError,
)
from tokenview.feed import TokenFeed
from tokenview.models import TokenPatch, TokenRecord
from tokenview.query import Page, SortKey, SortOrder, clamp_page, query, sort_records
from tokenview.reconcile import ReconcileResult, UpdateReconciler
from tokenview.state.events import (
    BulkPatchEvent,
    EventKind,
    NewTokenEvent,
    PriceTickEvent,
    SnapshotEvent,
    StreamEvent,
    VolumeTickEvent,
)
from tokenview.state.store import StateStore
from tokenview.stats import TokenStats, compute_stats

__all__ = [
    "__version__",
    "BulkPatchEvent",
    "EventKind",
    "NewTokenEvent",
    "Page",
    "PriceTickEvent",
    "ReconcileResult",
    "SnapshotEvent",
    "SortKey",
    "SortOrder",
    "StateStore",
    "StreamEvent",
    "TokenFeed",
    "TokenPatch",
    "TokenRecord",
    "TokenStats",
    "TokenViewConfig",
    "TokenViewConfigError",
    "TokenViewError",
    "TokenViewPayloadError",
    "TokenViewTransportError",
    "UpdateReconciler",
    "VolumeTickEvent",
    "clamp_page",
    "compute_stats",
    "query",
    "sort_records",
]
