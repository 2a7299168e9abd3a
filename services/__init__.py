"""
Services Package - Feed Reconciliation and Upload Intake.

Modules:
    feed_locks       - FeedLockRegistry (ranked per-feed locks)
    feed_store       - FeedStore (working copy + blob persistence)
    reconciliation   - FeedReconciler (insert_into_feed, validate)
    artifact_store   - ArtifactStore (artifact naming and storage)
    intake           - UploadIntakePipeline (upload/fetch -> feed)
    feed_registry    - FeedHandlerRegistry + build_feed_registry (composition root)
"""

from .feed_locks import FeedLockRegistry
from .feed_store import FeedStore
from .reconciliation import FeedReconciler
from .artifact_store import ArtifactStore, StoredArtifact
from .intake import UploadIntakePipeline
from .feed_registry import (
    FeedHandler,
    FeedHandlerRegistry,
    build_feed_registry,
    create_feed_registry,
)

__all__ = [
    'FeedLockRegistry',
    'FeedStore',
    'FeedReconciler',
    'ArtifactStore',
    'StoredArtifact',
    'UploadIntakePipeline',
    'FeedHandler',
    'FeedHandlerRegistry',
    'build_feed_registry',
    'create_feed_registry',
]
