"""
Notification Configuration.

New-package announcements are optional. Without NOTIFY_WEBHOOK_URL no sink
is built and intake skips the announcement step entirely.

Environment Variables:
    NOTIFY_WEBHOOK_URL   - Endpoint receiving {"text", "location"} JSON posts
    BITLY_ACCESS_TOKEN   - Optional; enables short links in announcements
    NOTIFY_TIMEOUT_SECONDS
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from .defaults import NotificationDefaults


class NotificationConfig(BaseModel):
    """Announcement sink settings."""

    webhook_url: Optional[str] = Field(
        default=None,
        description="Webhook receiving new-package announcements (None = disabled)"
    )
    bitly_access_token: Optional[str] = Field(
        default=None,
        description="Bitly v4 access token for URL shortening"
    )
    timeout_seconds: float = Field(
        default=NotificationDefaults.TIMEOUT_SECONDS,
        gt=0,
        description="HTTP timeout for shortener and webhook calls"
    )

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def debug_dict(self) -> dict:
        return {
            'webhook_url': self.webhook_url,
            'bitly_access_token': '***MASKED***' if self.bitly_access_token else None,
            'timeout_seconds': self.timeout_seconds,
        }

    @classmethod
    def from_environment(cls) -> "NotificationConfig":
        return cls(
            webhook_url=os.environ.get("NOTIFY_WEBHOOK_URL") or None,
            bitly_access_token=os.environ.get("BITLY_ACCESS_TOKEN") or None,
            timeout_seconds=float(os.environ.get(
                "NOTIFY_TIMEOUT_SECONDS", str(NotificationDefaults.TIMEOUT_SECONDS)
            )),
        )
