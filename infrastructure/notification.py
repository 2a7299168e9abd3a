# ============================================================================
# NOTIFICATION SINKS
# ============================================================================
# STATUS: Infrastructure - best-effort new-package announcements
# PURPOSE: Compose short announcements and post them to a webhook
# EXPORTS: INotificationSink, WebhookNotificationSink, BitlyShortener,
#          compose_announcement
# DEPENDENCIES: requests
# ============================================================================

"""
Notification Sinks.

Announcement format (fits a 140-character message):

    [zlib-1.2.5.0-x86] Compression library for everything https://bit.ly/abc

Callers treat every failure here as non-fatal.
"""

from abc import ABC, abstractmethod
from typing import Optional

import requests

from config.defaults import NotificationDefaults
from core.models.package import PackageMetadata
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "Notification")


def compose_announcement(metadata: PackageMetadata, short_url: str) -> str:
    """
    Build "[name-version-architecture] summary url".

    The summary is cut to 138 - len(tag) - len(url) characters and ends with
    an ellipsis when cut.
    """
    name = metadata.canonical_name
    tag = f"[{name.name}-{name.version}-{name.architecture}]"
    summary = (metadata.summary or "").strip()

    limit = NotificationDefaults.ANNOUNCEMENT_BUDGET - (len(tag) + len(short_url))
    if len(summary) > limit:
        summary = summary[:max(limit - 1, 0)].rstrip() + NotificationDefaults.ELLIPSIS

    parts = [tag, summary, short_url] if summary else [tag, short_url]
    return " ".join(parts)


class BitlyShortener:
    """
    Bitly v4 URL shortener.

    Returns the long URL unchanged when no token is configured or the call
    fails.
    """

    def __init__(self, access_token: Optional[str],
                 timeout_seconds: float = NotificationDefaults.TIMEOUT_SECONDS):
        self.access_token = access_token
        self.timeout_seconds = timeout_seconds

    def shorten(self, url: str) -> str:
        if not self.access_token:
            return url
        try:
            response = requests.post(
                NotificationDefaults.BITLY_SHORTEN_URL,
                headers={
                    "Authorization": f"Bearer {self.access_token}",
                    "Content-Type": "application/json",
                },
                json={"long_url": url},
                timeout=self.timeout_seconds
            )
            if response.status_code not in (200, 201):
                logger.warning(f"Bitly returned {response.status_code}: {response.text[:200]}")
                return url
            return response.json().get("link") or url
        except requests.exceptions.RequestException as e:
            logger.warning(f"Bitly shorten failed for {url}: {str(e)[:200]}")
            return url
        except ValueError as e:
            logger.warning(f"Bitly returned invalid JSON: {e}")
            return url


class INotificationSink(ABC):

    @abstractmethod
    def notify(self, location: str, text: str) -> None:
        pass

    def shorten(self, url: str) -> str:
        return url


class WebhookNotificationSink(INotificationSink):
    """POSTs {"text", "location"} JSON to a webhook."""

    def __init__(self, webhook_url: str, shortener: Optional[BitlyShortener] = None,
                 timeout_seconds: float = NotificationDefaults.TIMEOUT_SECONDS):
        self.webhook_url = webhook_url
        self.shortener = shortener
        self.timeout_seconds = timeout_seconds

    def shorten(self, url: str) -> str:
        if self.shortener is None:
            return url
        return self.shortener.shorten(url)

    def notify(self, location: str, text: str) -> None:
        """
        Raises:
            requests.RequestException: Transport failure or non-2xx response
        """
        response = requests.post(
            self.webhook_url,
            json={"text": text, "location": location},
            timeout=self.timeout_seconds
        )
        response.raise_for_status()
        logger.info(f"Announcement posted for {location}")
