"""
Config test fixtures — clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "FEED_NAMES", "CURRENT_FEED_NAME", "ARCHIVE_FEED_NAME", "FEED_WORK_DIR",
        "STORAGE_ACCOUNT_NAME", "STORAGE_CONNECTION_STRING", "PACKAGE_CONTAINER",
        "LOCAL_STORAGE_FOLDER", "ARTIFACT_EXTENSION", "ARTIFACT_ALIASES",
        "NOTIFY_WEBHOOK_URL", "BITLY_ACCESS_TOKEN", "NOTIFY_TIMEOUT_SECONDS",
        "PACKAGE_VALIDATOR", "LIVENESS_TIMEOUT_SECONDS", "DOWNLOAD_TIMEOUT_SECONDS",
        "DEBUG_MODE", "LOG_LEVEL",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("FEED_PREFIX_URL", "https://feeds.example.test")
    monkeypatch.setenv("PACKAGE_PREFIX_URL", "https://packages.example.test/pkgs")
    return monkeypatch
