# ============================================================================
# FEED CONFIGURATION
# ============================================================================
# STATUS: Config - per-feed handler settings
# PURPOSE: Feed names, distinguished roles, URL prefixes, working copy paths
# EXPORTS: FeedSettings, FeedHandlerConfig, http_slashed
# PYDANTIC_MODELS: FeedSettings, FeedHandlerConfig (frozen)
# DEPENDENCIES: pydantic, os
# SOURCE: FEED_PREFIX_URL, PACKAGE_PREFIX_URL, FEED_NAMES, CURRENT_FEED_NAME,
#         ARCHIVE_FEED_NAME, FEED_WORK_DIR
# ============================================================================

"""
Feed Configuration.

FeedSettings is the process-level view (which feeds exist, which two play the
current/archive roles). FeedHandlerConfig is the immutable per-feed value
object each handler is built from; one is produced per entry in FEED_NAMES by
FeedSettings.handler_config().
"""

import os
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from exceptions import ConfigurationError
from .defaults import FeedDefaults, StorageDefaults


def http_slashed(base: str, *segments: str) -> str:
    """
    Join URL segments with exactly one '/' between them and a trailing '/'
    when no segments are given.

    Example:
        http_slashed("https://feeds.example.org", "current")
        → "https://feeds.example.org/current"
        http_slashed("https://cdn.example.org/pkgs")
        → "https://cdn.example.org/pkgs/"
    """
    url = base.rstrip("/")
    if not segments:
        return url + "/"
    for segment in segments:
        url = f"{url}/{segment.strip('/')}"
    return url


class FeedHandlerConfig(BaseModel):
    """
    Immutable configuration for one feed handler.

    Established once at startup and reused for the life of the process.
    """
    model_config = ConfigDict(frozen=True)

    feed_name: str = Field(description="Logical feed name (lower-case)")
    canonical_feed_url: str = Field(description="Public URL of this feed")
    package_prefix_url: str = Field(description="Public URL prefix for artifacts (ends with '/')")
    local_feed_path: str = Field(description="Local working copy path")
    work_dir: str = Field(description="Directory for working copies and temp uploads")
    container: Optional[str] = Field(
        default=None,
        description="Blob container for remote persistence (None = local-only)"
    )
    local_storage_folder: Optional[str] = Field(
        default=None,
        description="Artifact folder for local-only mode"
    )

    @property
    def feed_blob_name(self) -> str:
        """Blob name for the plain feed document (lower-cased file name)."""
        return os.path.basename(self.local_feed_path).lower()

    @property
    def compressed_feed_blob_name(self) -> str:
        """Blob name for the gzip-compressed feed document."""
        return self.feed_blob_name + StorageDefaults.COMPRESSED_SUFFIX

    @property
    def is_remote(self) -> bool:
        return self.container is not None


class FeedSettings(BaseModel):
    """
    Process-level feed settings.

    FEED_NAMES order doubles as the feed lock order.
    """
    feed_prefix_url: str = Field(description="Base URL for canonical feed URLs")
    package_prefix_url: str = Field(description="Base URL for artifact download locations")
    feed_names: List[str] = Field(
        default_factory=lambda: FeedDefaults.FEED_NAMES.split(","),
        description="Configured feeds, in lock-acquisition order"
    )
    current_feed_name: str = Field(default=FeedDefaults.CURRENT_FEED_NAME)
    archive_feed_name: str = Field(default=FeedDefaults.ARCHIVE_FEED_NAME)
    work_dir: str = Field(default=FeedDefaults.WORK_DIR)

    def validate_roles(self) -> None:
        """
        Fail fast unless both distinguished roles are configured and the
        current feed is ordered before the archive feed.
        """
        missing = [
            role for role in (self.current_feed_name, self.archive_feed_name)
            if role not in self.feed_names
        ]
        if missing:
            raise ConfigurationError(
                f"FEED_NAMES {self.feed_names} must include the feed roles {missing}"
            )
        if self.feed_names.index(self.current_feed_name) > self.feed_names.index(self.archive_feed_name):
            raise ConfigurationError(
                f"'{self.current_feed_name}' must be listed before "
                f"'{self.archive_feed_name}' in FEED_NAMES (lock order)"
            )
        if len(set(self.feed_names)) != len(self.feed_names):
            raise ConfigurationError(f"FEED_NAMES contains duplicates: {self.feed_names}")

    def handler_config(
        self,
        feed_name: str,
        container: Optional[str] = None,
        local_storage_folder: Optional[str] = None
    ) -> FeedHandlerConfig:
        """
        Build the immutable config for one feed.

        Args:
            feed_name: One of feed_names
            container: Blob container when remote storage is configured
            local_storage_folder: Artifact folder for local-only mode
        """
        name = feed_name.lower()
        return FeedHandlerConfig(
            feed_name=name,
            canonical_feed_url=http_slashed(self.feed_prefix_url, name),
            package_prefix_url=http_slashed(self.package_prefix_url),
            local_feed_path=os.path.join(self.work_dir, name + FeedDefaults.FEED_FILE_SUFFIX),
            work_dir=self.work_dir,
            container=container,
            local_storage_folder=local_storage_folder,
        )

    @classmethod
    def from_environment(cls) -> "FeedSettings":
        """Load feed settings from environment (fail-fast on missing URLs)."""
        feed_prefix_url = os.environ.get("FEED_PREFIX_URL")
        package_prefix_url = os.environ.get("PACKAGE_PREFIX_URL")
        missing = [
            name for name, value in (
                ("FEED_PREFIX_URL", feed_prefix_url),
                ("PACKAGE_PREFIX_URL", package_prefix_url),
            ) if not value
        ]
        if missing:
            raise ConfigurationError(f"Required environment variables not set: {', '.join(missing)}")

        raw_names = os.environ.get("FEED_NAMES", FeedDefaults.FEED_NAMES)
        feed_names = [n.strip().lower() for n in raw_names.split(",") if n.strip()]

        settings = cls(
            feed_prefix_url=feed_prefix_url,
            package_prefix_url=package_prefix_url,
            feed_names=feed_names,
            current_feed_name=os.environ.get("CURRENT_FEED_NAME", FeedDefaults.CURRENT_FEED_NAME).lower(),
            archive_feed_name=os.environ.get("ARCHIVE_FEED_NAME", FeedDefaults.ARCHIVE_FEED_NAME).lower(),
            work_dir=os.environ.get("FEED_WORK_DIR", FeedDefaults.WORK_DIR),
        )
        settings.validate_roles()
        return settings
