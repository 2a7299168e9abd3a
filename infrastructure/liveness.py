# ============================================================================
# LIVENESS PROBER
# ============================================================================
# STATUS: Infrastructure - URL reachability checks
# PURPOSE: Header-only probes deciding whether a feed/location/link URL is live
# EXPORTS: ILivenessProber, LivenessProber
# DEPENDENCIES: requests
# ============================================================================

"""
Liveness Prober.

A URL is live when a HEAD request (redirects followed) answers with a status
below 400 within the timeout. Every failure (timeout, DNS, refused
connection, malformed URL, 4xx/5xx) means "not live"; the prober never
raises.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional

import requests

from config.defaults import NetworkDefaults
from core.models.catalog import dedupe_urls
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "LivenessProber")


class ILivenessProber(ABC):
    """Predicate over URLs; implementations must not raise."""

    @abstractmethod
    def is_live(self, url: str) -> bool:
        pass

    def filter_live(self, urls: Iterable[str]) -> List[str]:
        """De-duplicate (first occurrence wins) and keep only live URLs."""
        return [url for url in dedupe_urls(urls) if self.is_live(url)]


class LivenessProber(ILivenessProber):
    """
    HEAD-request prober.

    Each thread gets its own requests.Session, reused across that thread's
    probes. An injected `session` is shared by every thread instead.
    """

    def __init__(self, timeout_seconds: float = NetworkDefaults.LIVENESS_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None,
                 session_factory: Optional[Callable[[], requests.Session]] = None):
        self.timeout_seconds = timeout_seconds
        self._shared_session = session
        self._session_factory = session_factory or requests.Session
        self._local = threading.local()
        if session is not None:
            session.headers.setdefault("User-Agent", NetworkDefaults.USER_AGENT)

    def _session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            session.headers.setdefault("User-Agent", NetworkDefaults.USER_AGENT)
            self._local.session = session
            logger.debug(f"Created liveness session for thread {threading.current_thread().name}")
        return session

    def is_live(self, url: str) -> bool:
        response = None
        try:
            response = self._session().head(url, allow_redirects=True, timeout=self.timeout_seconds)
            live = response.status_code < 400
            logger.debug(f"Probe {url} -> {response.status_code} (live={live})")
            return live
        except requests.exceptions.Timeout:
            logger.debug(f"Probe {url} timed out ({self.timeout_seconds}s)")
            return False
        except requests.exceptions.RequestException as e:
            logger.debug(f"Probe {url} failed: {str(e)[:200]}")
            return False
        except Exception as e:
            logger.debug(f"Probe {url} raised {type(e).__name__}: {str(e)[:200]}")
            return False
        finally:
            if response is not None:
                response.close()
