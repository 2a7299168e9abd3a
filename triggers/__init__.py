"""
Triggers Package.

Azure Functions HTTP trigger implementations.

HTTP Endpoints:
    /api/feeds/{feed_name}: Package upload, fetch-and-add, validate
    /api/livez: Process liveness

Exports:
    Base classes; trigger instances are imported from their modules
"""

from .http_base import BaseHttpTrigger, SystemMonitoringTrigger

__all__ = [
    'BaseHttpTrigger',
    'SystemMonitoringTrigger',
]
