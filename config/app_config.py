"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - FeedSettings (feed names, roles, URL prefixes, working directory)
    - StorageConfig (blob storage or local-only persistence)
    - NotificationConfig (announcement webhook, URL shortener)

Exports:
    AppConfig: Main configuration class

Dependencies:
    pydantic: BaseModel for configuration validation
    config.feed_config: FeedSettings, FeedHandlerConfig
    config.storage_config: StorageConfig
    config.notification_config: NotificationConfig
    config.defaults: Default value constants

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .feed_config import FeedSettings, FeedHandlerConfig
from .storage_config import StorageConfig
from .notification_config import NotificationConfig
from .defaults import AppDefaults, NetworkDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.
    """

    # ========================================================================
    # Core Application Settings
    # ========================================================================

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Enable debug mode for verbose diagnostics. "
                    "Set DEBUG_MODE=true in environment to enable.",
        examples=[True, False]
    )

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Environment name (dev, qa, prod)",
        examples=["dev", "qa", "prod"]
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Logging level for application diagnostics",
        examples=["DEBUG", "INFO", "WARNING", "ERROR"]
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL '{value}' is not a logging level")
        return level

    # ========================================================================
    # Network
    # ========================================================================

    liveness_timeout_seconds: float = Field(
        default=NetworkDefaults.LIVENESS_TIMEOUT_SECONDS,
        gt=0,
        le=120,
        description="Timeout for HEAD liveness probes"
    )

    download_timeout_seconds: float = Field(
        default=NetworkDefaults.DOWNLOAD_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for fetch-and-add package downloads"
    )

    # ========================================================================
    # Package Validation
    # ========================================================================

    package_validator: Optional[str] = Field(
        default=None,
        description="Import path 'module:ClassName' of the IPackageValidator implementation"
    )

    # ========================================================================
    # Domain Configurations
    # ========================================================================

    feeds: FeedSettings = Field(description="Feed names, roles and URL prefixes")
    storage: StorageConfig = Field(default_factory=StorageConfig)
    notification: NotificationConfig = Field(default_factory=NotificationConfig)

    # ========================================================================
    # Derived Values
    # ========================================================================

    @property
    def effective_log_level(self) -> str:
        """LOG_LEVEL, or DEBUG when DEBUG_MODE is on."""
        return "DEBUG" if self.debug_mode else self.log_level

    def feed_handler_configs(self) -> List[FeedHandlerConfig]:
        """
        One immutable handler config per configured feed, in lock order.
        """
        container = self.storage.package_container if self.storage.is_remote else None
        return [
            self.feeds.handler_config(
                name,
                container=container,
                local_storage_folder=self.storage.local_storage_folder,
            )
            for name in self.feeds.feed_names
        ]

    # ========================================================================
    # Factory Methods
    # ========================================================================

    @classmethod
    def from_environment(cls):
        """Load all configs from environment."""
        return cls(
            debug_mode=os.environ.get("DEBUG_MODE", str(AppDefaults.DEBUG_MODE).lower()).lower() == "true",
            environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),
            liveness_timeout_seconds=float(os.environ.get(
                "LIVENESS_TIMEOUT_SECONDS", str(NetworkDefaults.LIVENESS_TIMEOUT_SECONDS)
            )),
            download_timeout_seconds=float(os.environ.get(
                "DOWNLOAD_TIMEOUT_SECONDS", str(NetworkDefaults.DOWNLOAD_TIMEOUT_SECONDS)
            )),
            package_validator=os.environ.get("PACKAGE_VALIDATOR") or None,

            # Domain configs
            feeds=FeedSettings.from_environment(),
            storage=StorageConfig.from_environment(),
            notification=NotificationConfig.from_environment(),
        )
