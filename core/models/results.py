# ============================================================================
# RESULT MODELS
# ============================================================================
# STATUS: Core - typed outcomes for feed store, reconciler and intake
# PURPOSE: Let callers and tests tell "legitimately empty" from "failed to load",
#          and map intake outcomes onto HTTP status codes in one place
# EXPORTS: FeedLoadOutcome, FeedLoadResult, FeedSaveResult, ReconcileResult,
#          IntakeStatus, IntakeResult
# DEPENDENCIES: pydantic, enum
# ============================================================================
"""
Result Models.

FeedLoadResult replaces the silent "any failure means empty feed" behavior
with a tagged outcome. The reconciler still proceeds from an empty document
on EMPTY and FAILED alike; the tag is for logging and tests.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from .catalog import CanonicalName, FeedDocument


# ============================================================================
# FEED STORE
# ============================================================================

class FeedLoadOutcome(str, Enum):
    """
    LOADED: working copy parsed
    EMPTY:  no working copy exists (new feed)
    FAILED: working copy unreadable; degraded to an empty document
    """
    LOADED = "loaded"
    EMPTY = "empty"
    FAILED = "failed"


class FeedLoadResult(BaseModel):
    feed_name: str
    outcome: FeedLoadOutcome
    document: FeedDocument = Field(default_factory=FeedDocument)
    remote_fetched: bool = False
    error: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.outcome == FeedLoadOutcome.FAILED


class FeedSaveResult(BaseModel):
    feed_name: str
    local_path: str
    entry_count: int
    uploaded_blobs: List[str] = Field(default_factory=list)
    remote_error: Optional[str] = None

    @property
    def remote_synced(self) -> bool:
        return bool(self.uploaded_blobs) and self.remote_error is None


# ============================================================================
# RECONCILIATION
# ============================================================================

class ReconcileResult(BaseModel):
    """Summary of one load-merge-save cycle."""
    feed_name: str
    load_outcome: FeedLoadOutcome
    entry_count: int
    migrated: List[str] = Field(default_factory=list, description="Entries moved to the archive feed")
    incoming_dropped: bool = False
    pruned: int = Field(default=0, description="Entries dropped for having no live location")
    save: Optional[FeedSaveResult] = None


# ============================================================================
# INTAKE
# ============================================================================

class IntakeStatus(str, Enum):
    ACCEPTED = "accepted"
    EMPTY_PAYLOAD = "empty_payload"
    NOT_A_PACKAGE = "not_a_package"
    VALIDATION_FAULT = "validation_fault"
    VALIDATION_CANCELLED = "validation_cancelled"
    FETCH_FAILED = "fetch_failed"

    @property
    def http_status(self) -> int:
        return _INTAKE_HTTP_STATUS[self]


_INTAKE_HTTP_STATUS = {
    IntakeStatus.ACCEPTED: 200,
    IntakeStatus.EMPTY_PAYLOAD: 400,
    IntakeStatus.NOT_A_PACKAGE: 400,
    IntakeStatus.VALIDATION_FAULT: 400,
    IntakeStatus.VALIDATION_CANCELLED: 400,
    IntakeStatus.FETCH_FAILED: 500,
}


class IntakeResult(BaseModel):
    feed_name: str
    status: IntakeStatus
    message: str = ""
    canonical_name: Optional[CanonicalName] = None
    location: Optional[str] = None
    reconcile: Optional[ReconcileResult] = None

    @property
    def http_status(self) -> int:
        return self.status.http_status

    @property
    def accepted(self) -> bool:
        return self.status == IntakeStatus.ACCEPTED

    def to_dict(self) -> dict:
        data = {
            'feed': self.feed_name,
            'status': self.status.value,
            'message': self.message,
        }
        if self.canonical_name is not None:
            data['package'] = str(self.canonical_name)
        if self.location:
            data['location'] = self.location
        if self.reconcile is not None:
            data['entries'] = self.reconcile.entry_count
            data['migrated'] = self.reconcile.migrated
        return data
