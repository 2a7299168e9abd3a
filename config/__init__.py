# ============================================================================
# CONFIG PACKAGE INIT
# ============================================================================
# STATUS: Config - package exports and singleton
# PURPOSE: Single entry point for application configuration
# EXPORTS: AppConfig, get_config, reset_config, debug_config, FeedSettings,
#          FeedHandlerConfig, StorageConfig, NotificationConfig
# PYDANTIC_MODELS: AppConfig, FeedSettings, FeedHandlerConfig, StorageConfig, NotificationConfig
# PATTERNS: Singleton, composition, facade
# ENTRY_POINTS: from config import get_config
# ============================================================================

"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── feed_config.py           # Feed names, roles, per-feed handler config
    ├── storage_config.py        # Blob storage / local-only persistence
    ├── notification_config.py   # Announcement webhook + URL shortener
    └── defaults.py              # Default values

Usage:
    from config import get_config
    config = get_config()
    for handler_config in config.feed_handler_configs():
        ...

    from config import debug_config
    info = debug_config()  # Secrets masked
"""

from typing import Optional

from .feed_config import FeedSettings, FeedHandlerConfig, http_slashed
from .storage_config import StorageConfig, parse_artifact_aliases
from .notification_config import NotificationConfig
from .app_config import AppConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton, loaded once from the environment.

    Raises:
        ConfigurationError: Required settings missing or inconsistent
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration (tests, or after env changes)."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).
    """
    try:
        config = get_config()
        return {
            'environment': config.environment,
            'debug_mode': config.debug_mode,
            'log_level': config.log_level,
            'feeds': {
                'feed_names': config.feeds.feed_names,
                'current': config.feeds.current_feed_name,
                'archive': config.feeds.archive_feed_name,
                'feed_prefix_url': config.feeds.feed_prefix_url,
                'package_prefix_url': config.feeds.package_prefix_url,
                'work_dir': config.feeds.work_dir,
            },
            'storage': config.storage.debug_dict(),
            'notification': config.notification.debug_dict(),
            'package_validator': config.package_validator,
            'liveness_timeout_seconds': config.liveness_timeout_seconds,
        }
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'AppConfig',
    'get_config',
    'reset_config',
    'debug_config',
    'FeedSettings',
    'FeedHandlerConfig',
    'http_slashed',
    'StorageConfig',
    'parse_artifact_aliases',
    'NotificationConfig',
]
