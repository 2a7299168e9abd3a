# ============================================================================
# REPOSITORY FACTORY
# ============================================================================
# STATUS: Infrastructure - central factory for adapters and repositories
# PURPOSE: Build blob repository, liveness prober, feed codec, package
#          validator, notification sink and announcement pool from AppConfig
# EXPORTS: RepositoryFactory
# DEPENDENCIES: config, infrastructure/*
# PATTERNS: Factory, Dependency Injection
# ENTRY_POINTS: RepositoryFactory.create_blob_repository(), create_prober(), ...
# ============================================================================

"""
Repository Factory - Central Creation Point

Single place where infrastructure objects are instantiated, so services only
ever see interfaces (IBlobRepository, ILivenessProber, IFeedCodec,
IPackageValidator, INotificationSink) and tests can hand in fakes.
"""

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Optional

from config import AppConfig, NotificationConfig, StorageConfig
from config.defaults import NotificationDefaults
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "RepositoryFactory")


class RepositoryFactory:
    """
    Factory for creating infrastructure instances.
    """

    @staticmethod
    def create_blob_repository(storage: StorageConfig) -> Optional['IBlobRepository']:
        """
        Create the blob repository, or None in local-only mode.

        A connection string takes precedence over DefaultAzureCredential.
        """
        if not storage.is_remote:
            logger.info("🏭 No storage account configured - running local-only")
            return None

        from .blob import BlobRepository

        logger.info("🏭 Creating Blob Storage repository")
        blob_repo = BlobRepository(
            connection_string=storage.connection_string,
            storage_account=storage.account_name
        )
        logger.info("✅ Blob repository created successfully")
        return blob_repo

    @staticmethod
    def create_prober(timeout_seconds: float) -> 'ILivenessProber':
        from .liveness import LivenessProber

        logger.debug(f"🏭 Creating LivenessProber (timeout={timeout_seconds}s)")
        return LivenessProber(timeout_seconds=timeout_seconds)

    @staticmethod
    def create_feed_codec() -> 'IFeedCodec':
        from .feed_codec import AtomFeedCodec
        return AtomFeedCodec()

    @staticmethod
    def create_package_validator(import_path: Optional[str]) -> 'IPackageValidator':
        """
        Raises:
            ConfigurationError: PACKAGE_VALIDATOR unset or invalid
        """
        from .package_validator import load_package_validator

        logger.info(f"🏭 Loading package validator: {import_path}")
        return load_package_validator(import_path)

    @staticmethod
    def create_notification_sink(notification: NotificationConfig) -> Optional['INotificationSink']:
        """Create the webhook sink, or None when notifications are disabled."""
        if not notification.enabled:
            logger.info("🏭 Notifications disabled (NOTIFY_WEBHOOK_URL not set)")
            return None

        from .notification import BitlyShortener, WebhookNotificationSink

        shortener = None
        if notification.bitly_access_token:
            shortener = BitlyShortener(
                notification.bitly_access_token,
                timeout_seconds=notification.timeout_seconds
            )
        logger.info("🏭 Creating webhook notification sink")
        return WebhookNotificationSink(
            notification.webhook_url,
            shortener=shortener,
            timeout_seconds=notification.timeout_seconds
        )

    @staticmethod
    def create_announce_executor(notifier: Optional['INotificationSink']) -> Optional[Executor]:
        """Worker pool for announcements, or None when there is no notifier."""
        if notifier is None:
            return None
        logger.debug(f"🏭 Creating announcement pool ({NotificationDefaults.ANNOUNCE_WORKERS} workers)")
        return ThreadPoolExecutor(
            max_workers=NotificationDefaults.ANNOUNCE_WORKERS,
            thread_name_prefix="announce"
        )

    @staticmethod
    def create_all(config: AppConfig) -> dict:
        """
        Build every infrastructure dependency the feed registry needs.

        Returns:
            Dict with blob_repo, prober, codec, validator, notifier,
            announce_executor
        """
        notifier = RepositoryFactory.create_notification_sink(config.notification)
        return {
            'blob_repo': RepositoryFactory.create_blob_repository(config.storage),
            'prober': RepositoryFactory.create_prober(config.liveness_timeout_seconds),
            'codec': RepositoryFactory.create_feed_codec(),
            'validator': RepositoryFactory.create_package_validator(config.package_validator),
            'notifier': notifier,
            'announce_executor': RepositoryFactory.create_announce_executor(notifier),
        }
