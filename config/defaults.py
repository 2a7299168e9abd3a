"""
Configuration Defaults - Single source of truth for all default values.

FAIL-FAST DESIGN:
The two public URL prefixes have NO usable default. AppConfig.from_environment()
raises ConfigurationError when FEED_PREFIX_URL or PACKAGE_PREFIX_URL is unset,
so a deployment never publishes feeds pointing at a placeholder host.

Organization:
    - FeedDefaults: feed names and roles, working directory
    - StorageDefaults: blob container, artifact naming
    - NetworkDefaults: probe and download timeouts
    - NotificationDefaults: Bitly endpoint, announcement length
    - AppDefaults: environment and logging

Usage:
    from config.defaults import FeedDefaults

    # In Pydantic Field definitions:
    current_feed_name: str = Field(default=FeedDefaults.CURRENT_FEED_NAME, ...)
"""

import os
import tempfile


# =============================================================================
# FEED DEFAULTS
# =============================================================================

class FeedDefaults:
    """
    Feed naming and working copy defaults.

    FEED_NAMES order is also the global lock order: a thread holding the
    lock of a feed may only take locks of feeds listed after it.
    """

    FEED_NAMES = "current,archive"
    CURRENT_FEED_NAME = "current"
    ARCHIVE_FEED_NAME = "archive"

    # Working copies are named "<feed_name>.feed.xml"
    FEED_FILE_SUFFIX = ".feed.xml"

    WORK_DIR = os.path.join(tempfile.gettempdir(), "package-feeds")


# =============================================================================
# STORAGE DEFAULTS
# =============================================================================

class StorageDefaults:
    """
    Blob storage defaults - safe for any deployment.

    Feeds and artifacts share one container; feed blobs are
    "<feed>.feed.xml" and "<feed>.feed.xml.gz".
    """

    PACKAGE_CONTAINER = "packages"
    ARTIFACT_EXTENSION = ".msi"
    COMPRESSED_SUFFIX = ".gz"
    FEED_CONTENT_TYPE = "application/atom+xml"
    ARTIFACT_CONTENT_TYPE = "application/octet-stream"


# =============================================================================
# NETWORK DEFAULTS
# =============================================================================

class NetworkDefaults:
    """Timeouts for outbound HTTP."""

    LIVENESS_TIMEOUT_SECONDS = 10.0
    DOWNLOAD_TIMEOUT_SECONDS = 120.0
    DOWNLOAD_CHUNK_SIZE = 1024 * 1024
    USER_AGENT = "package-feed-service/1.0"


# =============================================================================
# NOTIFICATION DEFAULTS
# =============================================================================

class NotificationDefaults:
    """Announcement formatting."""

    BITLY_SHORTEN_URL = "https://api-ssl.bitly.com/v4/shorten"
    MAX_ANNOUNCEMENT_LENGTH = 140
    # Two characters reserved for the separating spaces
    ANNOUNCEMENT_BUDGET = MAX_ANNOUNCEMENT_LENGTH - 2
    ELLIPSIS = "…"
    TIMEOUT_SECONDS = 10.0
    ANNOUNCE_WORKERS = 2


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Core application settings."""

    ENVIRONMENT = "dev"
    LOG_LEVEL = "INFO"
    DEBUG_MODE = False
