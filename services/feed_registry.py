# ============================================================================
# FEED HANDLER REGISTRY
# ============================================================================
# STATUS: Service - composition root for feed handlers
# PURPOSE: Map feed names to eagerly built handlers so one feed can address
#          another (current -> archive) by name
# EXPORTS: FeedHandler, FeedHandlerRegistry, build_feed_registry,
#          create_feed_registry
# DEPENDENCIES: config, infrastructure.factory, services/*
# ============================================================================
"""
Feed Handler Registry - Explicit Registration.

Every feed listed in FEED_NAMES gets exactly one FeedHandler, built at
startup and never torn down. No lazy initialization: a feed that is not in
the registry is a deployment error and get() raises
FeedHandlerNotRegisteredError.

Usage:
    registry = create_feed_registry(get_config())
    handler = registry.get("current")
    handler.intake.handle_upload(body)
"""

from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Dict, List, Optional

from config import AppConfig, FeedHandlerConfig
from exceptions import ConfigurationError, FeedHandlerNotRegisteredError
from infrastructure.blob import IBlobRepository
from infrastructure.feed_codec import IFeedCodec
from infrastructure.liveness import ILivenessProber
from infrastructure.notification import INotificationSink
from infrastructure.package_validator import IPackageValidator
from util_logger import LoggerFactory, ComponentType
from .artifact_store import ArtifactStore
from .feed_locks import FeedLockRegistry
from .feed_store import FeedStore
from .intake import UploadIntakePipeline
from .reconciliation import FeedReconciler

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "FeedHandlerRegistry")


@dataclass
class FeedHandler:
    """Initialized handler for one named feed."""
    config: FeedHandlerConfig
    reconciler: FeedReconciler
    intake: UploadIntakePipeline

    @property
    def name(self) -> str:
        return self.config.feed_name


class FeedHandlerRegistry:
    """
    Feed name -> FeedHandler, in registration order.
    """

    def __init__(self):
        self._handlers: Dict[str, FeedHandler] = {}

    def register(self, handler: FeedHandler) -> None:
        """
        Raises:
            ConfigurationError: A handler with the same name is registered
        """
        name = handler.name.lower()
        if name in self._handlers:
            raise ConfigurationError(f"Feed handler '{name}' is already registered")
        self._handlers[name] = handler
        logger.debug(f"Registered feed handler '{name}'")

    def get(self, feed_name: str) -> FeedHandler:
        """
        Raises:
            FeedHandlerNotRegisteredError: Unknown feed name
        """
        handler = self._handlers.get((feed_name or "").lower())
        if handler is None:
            raise FeedHandlerNotRegisteredError(feed_name, self.names())
        return handler

    def names(self) -> List[str]:
        return list(self._handlers)

    def __contains__(self, feed_name: str) -> bool:
        return (feed_name or "").lower() in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def build_feed_registry(
    config: AppConfig,
    *,
    prober: ILivenessProber,
    codec: IFeedCodec,
    validator: Optional[IPackageValidator],
    blob_repo: Optional[IBlobRepository] = None,
    notifier: Optional[INotificationSink] = None,
    announce_executor: Optional[Executor] = None,
) -> FeedHandlerRegistry:
    """
    Build one handler per configured feed, sharing store, locks and adapters.
    """
    feeds = config.feeds
    registry = FeedHandlerRegistry()
    locks = FeedLockRegistry(feeds.feed_names)
    store = FeedStore(codec, blob_repo=blob_repo)
    artifact_store = ArtifactStore(
        blob_repo=blob_repo,
        extension=config.storage.artifact_extension,
        aliases=config.storage.artifact_aliases,
    )

    for handler_config in config.feed_handler_configs():
        reconciler = FeedReconciler(
            config=handler_config,
            store=store,
            locks=locks,
            prober=prober,
            validator=validator,
            registry=registry,
            current_feed_name=feeds.current_feed_name,
            archive_feed_name=feeds.archive_feed_name,
        )
        intake = UploadIntakePipeline(
            config=handler_config,
            validator=validator,
            artifact_store=artifact_store,
            reconciler=reconciler,
            prober=prober,
            notifier=notifier,
            download_timeout_seconds=config.download_timeout_seconds,
            announce_executor=announce_executor,
        )
        registry.register(FeedHandler(config=handler_config, reconciler=reconciler, intake=intake))

    logger.info(f"✅ Feed registry built: {registry.names()} (remote={blob_repo is not None})")
    return registry


def create_feed_registry(config: AppConfig) -> FeedHandlerRegistry:
    """
    Build the registry with infrastructure from RepositoryFactory.

    Raises:
        ConfigurationError: Package validator or storage misconfigured
    """
    from infrastructure.factory import RepositoryFactory

    return build_feed_registry(config, **RepositoryFactory.create_all(config))
