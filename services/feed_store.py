# ============================================================================
# FEED STORE
# ============================================================================
# STATUS: Service - feed document persistence
# PURPOSE: Load a feed from remote storage into its local working copy and
#          persist the working copy back in plain and gzip encodings
# EXPORTS: FeedStore
# DEPENDENCIES: infrastructure.blob, infrastructure.feed_codec
# ============================================================================
"""
Feed Store.

Load:
    1. Remote configured: download <feed file>.lower() into the working copy
       (best-effort; failures are logged and the existing working copy is used)
    2. Parse the working copy
         missing file   -> EMPTY
         parse failure  -> FAILED (logged, empty document)
         otherwise      -> LOADED

Save:
    1. Serialize atomically to the working copy
    2. Remote configured: upload it as <name> and gzip-compressed as <name>.gz
       (failures are logged and recorded on the result; the local file stays)

Callers serialize access per feed through FeedLockRegistry.
"""

import os
from datetime import datetime, timezone
from typing import Optional

from azure.core.exceptions import ResourceNotFoundError

from config import FeedHandlerConfig
from config.defaults import StorageDefaults
from core.models.catalog import FeedDocument
from core.models.results import FeedLoadOutcome, FeedLoadResult, FeedSaveResult
from exceptions import FeedFormatError, TransientFault
from infrastructure.blob import IBlobRepository
from infrastructure.feed_codec import IFeedCodec
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "FeedStore")


class FeedStore:
    """
    Working-copy and blob persistence for feed documents.

    One store is shared by all feed handlers; per-feed details come from the
    FeedHandlerConfig passed to each call.
    """

    def __init__(self, codec: IFeedCodec, blob_repo: Optional[IBlobRepository] = None):
        self.codec = codec
        self.blob_repo = blob_repo

    def _remote_enabled(self, config: FeedHandlerConfig) -> bool:
        return self.blob_repo is not None and config.is_remote

    # ========================================================================
    # LOAD
    # ========================================================================

    def load(self, config: FeedHandlerConfig) -> FeedLoadResult:
        remote_fetched = False
        if self._remote_enabled(config):
            remote_fetched = self._fetch_remote(config)

        path = config.local_feed_path
        if not os.path.exists(path):
            logger.info(f"No working copy for feed '{config.feed_name}' - starting empty")
            return FeedLoadResult(
                feed_name=config.feed_name,
                outcome=FeedLoadOutcome.EMPTY,
                remote_fetched=remote_fetched,
            )

        try:
            document = self.codec.read(path)
        except (FeedFormatError, OSError) as e:
            logger.error(
                f"Feed '{config.feed_name}' working copy unreadable - degrading to empty: {e}",
                extra={'custom_dimensions': {'feed_name': config.feed_name, 'path': path}}
            )
            return FeedLoadResult(
                feed_name=config.feed_name,
                outcome=FeedLoadOutcome.FAILED,
                remote_fetched=remote_fetched,
                error=str(e),
            )

        logger.debug(f"Loaded feed '{config.feed_name}' with {len(document)} entries")
        return FeedLoadResult(
            feed_name=config.feed_name,
            outcome=FeedLoadOutcome.LOADED,
            document=document,
            remote_fetched=remote_fetched,
        )

    def _fetch_remote(self, config: FeedHandlerConfig) -> bool:
        try:
            size = self.blob_repo.download_to_file(
                config.container, config.feed_blob_name, config.local_feed_path
            )
            logger.debug(f"Fetched {config.container}/{config.feed_blob_name} ({size} bytes)")
            return True
        except ResourceNotFoundError:
            logger.info(f"No remote copy of feed '{config.feed_name}' yet; using local working copy")
            return False
        except (TransientFault, OSError) as e:
            logger.warning(
                f"Could not fetch remote feed {config.container}/{config.feed_blob_name}; "
                f"using local working copy: {type(e).__name__}: {str(e)[:200]}"
            )
            return False

    # ========================================================================
    # SAVE
    # ========================================================================

    def save(self, config: FeedHandlerConfig, document: FeedDocument) -> FeedSaveResult:
        """
        Raises:
            OSError: The local working copy could not be written
        """
        if not document.feed_id:
            document.feed_id = config.canonical_feed_url
        if not document.title:
            document.title = config.feed_name
        document.updated = datetime.now(timezone.utc)

        self.codec.write(document, config.local_feed_path)
        result = FeedSaveResult(
            feed_name=config.feed_name,
            local_path=config.local_feed_path,
            entry_count=len(document),
        )
        logger.info(f"Saved feed '{config.feed_name}' ({len(document)} entries) to {config.local_feed_path}")

        if not self._remote_enabled(config):
            return result

        uploads = (
            (config.feed_blob_name, False),
            (config.compressed_feed_blob_name, True),
        )
        for blob_name, compressed in uploads:
            try:
                self.blob_repo.upload_file(
                    config.container,
                    blob_name,
                    config.local_feed_path,
                    compressed=compressed,
                    content_type=StorageDefaults.FEED_CONTENT_TYPE,
                )
                result.uploaded_blobs.append(blob_name)
            except (TransientFault, OSError) as e:
                logger.error(
                    f"Failed to upload feed blob {config.container}/{blob_name}: {e}",
                    extra={'custom_dimensions': {'feed_name': config.feed_name, 'blob': blob_name}}
                )
                result.remote_error = f"{blob_name}: {type(e).__name__}: {e}"
                break

        return result
