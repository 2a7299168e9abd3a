# ============================================================================
# FEED HTTP TRIGGER
# ============================================================================
# STATUS: HTTP Trigger - feed intake and maintenance
# PURPOSE: Route feed requests to the named feed's intake pipeline or
#          reconciler and map outcomes onto HTTP status codes
# EXPORTS: FeedTrigger
# INTERFACES: BaseHttpTrigger (http_base.py)
# DEPENDENCIES: azure.functions, services.feed_registry
# ENTRY_POINTS: feed_trigger.handle_request_async(req)
# ============================================================================
"""
Feed HTTP Trigger.

Routes:
    GET      /api/feeds/{feed_name}?command=add&location=<url>   fetch and add
    GET      /api/feeds/{feed_name}?command=validate             prune dead entries
    PUT|POST /api/feeds/{feed_name}                              upload package body

Status codes:
    200  package accepted / validation finished
    400  empty body, unrecognized package, missing location, unknown command
    404  unknown feed name
    500  remote fetch failed, unexpected fault
"""

from typing import List

import azure.functions as func

from exceptions import ClientError
from services.feed_registry import FeedHandlerRegistry
from .http_base import BaseHttpTrigger, ResponseData

COMMAND_ADD = "add"
COMMAND_VALIDATE = "validate"


class FeedTrigger(BaseHttpTrigger):
    """Feed endpoint dispatching on method and ?command=."""

    def __init__(self, registry: FeedHandlerRegistry):
        super().__init__("feeds")
        self.registry = registry

    def get_allowed_methods(self) -> List[str]:
        return ["GET", "PUT", "POST"]

    def process_request(self, req: func.HttpRequest) -> ResponseData:
        feed_name = self.extract_path_params(req, ["feed_name"])["feed_name"]
        handler = self.registry.get(feed_name)

        if req.method in ("PUT", "POST"):
            result = handler.intake.handle_upload(req.get_body() or b"")
            return result.to_dict(), result.http_status

        command = (req.params.get("command") or "").strip().lower()

        if command == COMMAND_ADD:
            location = self.extract_query_params(req, required_params=["location"])["location"]
            result = handler.intake.handle_remote(location)
            return result.to_dict(), result.http_status

        if command == COMMAND_VALIDATE:
            outcome = handler.reconciler.validate()
            return {
                "feed": outcome.feed_name,
                "status": "validated",
                "entries": outcome.entry_count,
                "pruned": outcome.pruned,
                "load_outcome": outcome.load_outcome.value,
            }

        raise ClientError(
            f"Unknown command '{command}'. Supported: {COMMAND_ADD}, {COMMAND_VALIDATE}"
        )
