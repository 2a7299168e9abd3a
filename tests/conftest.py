"""
Root conftest.py — sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without Azure credentials or network access.
"""

import os
import sys
from types import SimpleNamespace

import pytest

# Add project root to sys.path so 'core', 'config', 'services', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables so get_config() succeeds without
    any deployment settings.
    """
    defaults = {
        "FEED_PREFIX_URL": "https://feeds.example.test",
        "PACKAGE_PREFIX_URL": "https://packages.example.test/pkgs",
        "ENVIRONMENT": "dev",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def _reset_config_singleton():
    """Each test sees configuration loaded from its own environment."""
    from config import reset_config
    reset_config()
    yield
    reset_config()


# ============================================================================
# FEED FIXTURES
# ============================================================================

@pytest.fixture
def feed_settings(tmp_path):
    from config import FeedSettings
    from tests.factories.fakes import FEED_PREFIX, PACKAGE_PREFIX

    return FeedSettings(
        feed_prefix_url=FEED_PREFIX,
        package_prefix_url=PACKAGE_PREFIX,
        work_dir=str(tmp_path / "work"),
    )


@pytest.fixture
def current_config(feed_settings):
    """Remote-mode handler config for the 'current' feed."""
    from tests.factories.fakes import CONTAINER
    return feed_settings.handler_config("current", container=CONTAINER)


@pytest.fixture
def local_config(feed_settings, tmp_path):
    """Local-only handler config for the 'current' feed."""
    return feed_settings.handler_config(
        "current", local_storage_folder=str(tmp_path / "artifacts")
    )


@pytest.fixture
def codec():
    from infrastructure.feed_codec import AtomFeedCodec
    return AtomFeedCodec()


@pytest.fixture
def make_app(feed_settings, tmp_path):
    """
    Factory fixture: wire a FeedHandlerRegistry around in-memory fakes.

    Returns a namespace with registry, config, blob_repo, prober, validator,
    notifier and codec.
    """
    from config import AppConfig, StorageConfig
    from infrastructure.feed_codec import AtomFeedCodec
    from services.feed_registry import build_feed_registry
    from tests.factories.fakes import (
        CONTAINER,
        FakePackageValidator,
        InMemoryBlobRepository,
        StaticProber,
    )

    def _make(remote=True, dead=(), validator=None, notifier=None, aliases=None):
        storage = StorageConfig(
            account_name="testaccount" if remote else None,
            package_container=CONTAINER,
            local_storage_folder=None if remote else str(tmp_path / "artifacts"),
            artifact_aliases=aliases or {},
        )
        config = AppConfig(feeds=feed_settings, storage=storage)
        blob_repo = InMemoryBlobRepository() if remote else None
        prober = StaticProber(dead=dead)
        validator = validator or FakePackageValidator()
        registry = build_feed_registry(
            config,
            prober=prober,
            codec=AtomFeedCodec(),
            validator=validator,
            blob_repo=blob_repo,
            notifier=notifier,
        )
        return SimpleNamespace(
            registry=registry,
            config=config,
            blob_repo=blob_repo,
            prober=prober,
            validator=validator,
            notifier=notifier,
            codec=AtomFeedCodec(),
        )

    return _make
