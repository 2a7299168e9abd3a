"""
Core Data Models Package.

Contains pure data structures without I/O.

Exports:
    CanonicalName, FeedLink, CatalogEntry, FeedDocument: Feed data model
    PackageIdentity, PackageMetadata, UploadedArtifact: Package validator I/O
    FeedLoadOutcome, FeedLoadResult, FeedSaveResult, ReconcileResult,
    IntakeStatus, IntakeResult: Typed results
"""

from .catalog import (
    CanonicalName,
    FeedLink,
    CatalogEntry,
    FeedDocument,
    parse_version,
    dedupe_urls,
)
from .package import (
    PackageIdentity,
    PackageMetadata,
    UploadedArtifact,
)
from .results import (
    FeedLoadOutcome,
    FeedLoadResult,
    FeedSaveResult,
    ReconcileResult,
    IntakeStatus,
    IntakeResult,
)

__all__ = [
    'CanonicalName',
    'FeedLink',
    'CatalogEntry',
    'FeedDocument',
    'parse_version',
    'dedupe_urls',
    'PackageIdentity',
    'PackageMetadata',
    'UploadedArtifact',
    'FeedLoadOutcome',
    'FeedLoadResult',
    'FeedSaveResult',
    'ReconcileResult',
    'IntakeStatus',
    'IntakeResult',
]
