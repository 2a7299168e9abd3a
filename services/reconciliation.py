# ============================================================================
# FEED RECONCILIATION ENGINE
# ============================================================================
# STATUS: Service - core feed mutation logic
# PURPOSE: Merge one catalog entry into a feed (dedup, liveness pruning,
#          migration of superseded versions to the archive feed) and prune
#          dead entries on demand
# EXPORTS: FeedReconciler
# DEPENDENCIES: services.feed_store, services.feed_locks, infrastructure.liveness
# ============================================================================
"""
Feed Reconciliation Engine.

insert_into_feed() runs one load-merge-save cycle under the feed's lock:

    1. load the working copy (any failure -> start from empty)
    2. rebuild a fresh document from the existing entries; on the current
       feed, entries that are strictly older versions of the incoming package
       are handed to the archive feed's reconciler and left out
    3. resolve the incoming entry (argument, else the package validator)
    4. put this feed's URL and the new location first, de-duplicate, drop
       every feed/location/link URL that fails the liveness probe
    5. keep the entry only if a location survived
    6. save

The archive call happens while the current feed's lock is still held; the
lock registry only allows current -> archive, never the reverse.
"""

from typing import TYPE_CHECKING, List, Optional

from config import FeedHandlerConfig
from core.models.catalog import CanonicalName, CatalogEntry, FeedDocument
from core.models.results import FeedLoadOutcome, FeedLoadResult, ReconcileResult
from infrastructure.liveness import ILivenessProber
from infrastructure.package_validator import IPackageValidator
from util_logger import LoggerFactory, ComponentType
from .feed_locks import FeedLockRegistry
from .feed_store import FeedStore

if TYPE_CHECKING:
    from .feed_registry import FeedHandlerRegistry


class FeedReconciler:
    """
    Load-merge-save cycles for one feed.
    """

    def __init__(
        self,
        config: FeedHandlerConfig,
        store: FeedStore,
        locks: FeedLockRegistry,
        prober: ILivenessProber,
        validator: Optional[IPackageValidator],
        registry: "FeedHandlerRegistry",
        current_feed_name: str,
        archive_feed_name: str,
    ):
        self.config = config
        self.store = store
        self.locks = locks
        self.prober = prober
        self.validator = validator
        self.registry = registry
        self.current_feed_name = current_feed_name
        self.archive_feed_name = archive_feed_name
        self.logger = LoggerFactory.create_with_context(
            ComponentType.SERVICE,
            f"FeedReconciler.{config.feed_name}",
            feed_name=config.feed_name
        )

    @property
    def feed_name(self) -> str:
        return self.config.feed_name

    @property
    def is_current_feed(self) -> bool:
        return self.config.feed_name == self.current_feed_name

    # ========================================================================
    # INSERT
    # ========================================================================

    def insert_into_feed(
        self,
        canonical_name: CanonicalName,
        location: Optional[str],
        entry: Optional[CatalogEntry] = None
    ) -> ReconcileResult:
        """
        Merge one package into this feed.

        Args:
            canonical_name: Identity of the incoming package
            location: Download URL to put first in the entry's locations
            entry: Catalog entry to merge; looked up through the package
                validator when omitted

        Raises:
            LockOrderViolationError: Called while holding a later feed's lock
        """
        with self.locks.acquire(self.feed_name):
            loaded = self._load()
            existing_doc = loaded.document
            document = FeedDocument(feed_id=existing_doc.feed_id, title=existing_doc.title)
            migrated: List[str] = []

            for existing in existing_doc.entries:
                if self._supersedes(canonical_name, existing):
                    self._migrate_to_archive(existing)
                    migrated.append(str(existing.canonical_name))
                    continue
                document.add(existing)

            incoming = entry if entry is not None else self._lookup_entry(canonical_name)
            incoming_dropped = False
            if incoming is not None:
                incoming = incoming.model_copy(deep=True)
                previous = document.find(incoming.canonical_name)
                self._prepare_incoming(incoming, location, previous)
                if incoming.has_locations:
                    document.add(incoming)
                else:
                    # previous locations were merged and pruned with the incoming ones
                    if previous is not None:
                        document.remove(previous.canonical_name)
                    incoming_dropped = True
                    self.logger.warning(
                        f"Dropping {incoming.canonical_name} from '{self.feed_name}': no live locations"
                    )
            else:
                incoming_dropped = True
                self.logger.warning(f"No catalog entry available for {canonical_name}; feed rebuilt without it")

            save = self.store.save(self.config, document)

        self.logger.info(
            f"Reconciled {canonical_name} into '{self.feed_name}' "
            f"({len(document)} entries, migrated={migrated}, dropped={incoming_dropped})"
        )
        return ReconcileResult(
            feed_name=self.feed_name,
            load_outcome=loaded.outcome,
            entry_count=len(document),
            migrated=migrated,
            incoming_dropped=incoming_dropped,
            save=save,
        )

    def _supersedes(self, incoming: CanonicalName, existing: CatalogEntry) -> bool:
        return (
            self.is_current_feed
            and existing.canonical_name.differs_only_by_version(incoming)
            and existing.canonical_name.is_older_than(incoming)
        )

    def _migrate_to_archive(self, existing: CatalogEntry) -> None:
        archive = self.registry.get(self.archive_feed_name)
        first_location = existing.locations[0] if existing.locations else None
        self.logger.info(f"Migrating {existing.canonical_name} to '{self.archive_feed_name}'")
        archive.reconciler.insert_into_feed(existing.canonical_name, first_location, entry=existing)

    def _lookup_entry(self, canonical_name: CanonicalName) -> Optional[CatalogEntry]:
        if self.validator is None:
            return None
        return self.validator.get_catalog_entry(canonical_name)

    def _prepare_incoming(
        self,
        incoming: CatalogEntry,
        location: Optional[str],
        previous: Optional[CatalogEntry]
    ) -> None:
        """Front-insert feed URL and location, merge a previous copy, prune dead URLs."""
        incoming.ensure_feed(self.config.canonical_feed_url)
        if location:
            incoming.ensure_location(location)
        if previous is not None:
            incoming.feeds.extend(previous.feeds)
            incoming.locations.extend(previous.locations)
            known = {link.href for link in incoming.links}
            incoming.links.extend(link for link in previous.links if link.href not in known)

        self._prune_entry(incoming)

    def _prune_entry(self, entry: CatalogEntry) -> None:
        entry.feeds = self.prober.filter_live(entry.feeds)
        entry.locations = self.prober.filter_live(entry.locations)
        entry.links = [link for link in entry.links if self.prober.is_live(link.href)]

    # ========================================================================
    # VALIDATE
    # ========================================================================

    def validate(self) -> ReconcileResult:
        """
        Re-probe every entry and drop those left without a live location.
        """
        with self.locks.acquire(self.feed_name):
            loaded = self._load()
            existing_doc = loaded.document
            document = FeedDocument(feed_id=existing_doc.feed_id, title=existing_doc.title)
            pruned = 0

            for existing in existing_doc.entries:
                entry = existing.model_copy(deep=True)
                self._prune_entry(entry)
                if entry.has_locations:
                    document.add(entry)
                else:
                    pruned += 1
                    self.logger.info(f"Pruned {entry.canonical_name} from '{self.feed_name}': no live locations")

            save = self.store.save(self.config, document)

        self.logger.info(f"Validated '{self.feed_name}': {len(document)} kept, {pruned} pruned")
        return ReconcileResult(
            feed_name=self.feed_name,
            load_outcome=loaded.outcome,
            entry_count=len(document),
            pruned=pruned,
            save=save,
        )

    def _load(self) -> FeedLoadResult:
        try:
            return self.store.load(self.config)
        except Exception as e:
            self.logger.error(f"Loading feed '{self.feed_name}' raised - starting from empty: {e}", exc_info=True)
            return FeedLoadResult(
                feed_name=self.feed_name,
                outcome=FeedLoadOutcome.FAILED,
                error=str(e),
            )
