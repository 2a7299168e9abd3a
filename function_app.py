"""
Azure Functions entry point for the Package Feed Service.

Accepts package uploads, keeps the named feeds (Atom catalogs of package
entries) reconciled, and mirrors them to Azure Blob Storage.

Architecture:
    HTTP -> FeedTrigger -> FeedHandlerRegistry -> UploadIntakePipeline
                                                   |            |
                                        PackageValidator   ArtifactStore
                                                   |
                                             FeedReconciler -> FeedStore -> Blob Storage
                                                   |                  |
                                         (archive reconciler)   local working copy

Endpoints:
    GET      /api/feeds/{feed_name}?command=add&location=<url>
    GET      /api/feeds/{feed_name}?command=validate
    PUT|POST /api/feeds/{feed_name}
    GET      /api/livez

Environment Variables:
    FEED_PREFIX_URL, PACKAGE_PREFIX_URL: Required URL prefixes
    FEED_NAMES: Feed names in lock order (default "current,archive")
    STORAGE_ACCOUNT_NAME / STORAGE_CONNECTION_STRING: Remote persistence
    PACKAGE_VALIDATOR: "module:ClassName" of the IPackageValidator
    LOG_LEVEL, DEBUG_MODE: Application log level (DEBUG_MODE=true forces DEBUG)
    See config/ for the full list.

Exports:
    app: Azure Function App instance
    feed_registry: Feed handlers built at startup
"""

import logging

import azure.functions as func

# Suppress Azure Identity and Azure SDK authentication/HTTP logging
logging.getLogger("azure.identity").setLevel(logging.WARNING)
logging.getLogger("azure.identity._internal").setLevel(logging.WARNING)
logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)
logging.getLogger("azure.storage").setLevel(logging.WARNING)
logging.getLogger("azure.core").setLevel(logging.WARNING)
logging.getLogger("msal").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)

from config import get_config, debug_config
from services.feed_registry import create_feed_registry
from triggers.feed_trigger import FeedTrigger
from triggers.livez import livez_trigger
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "function_app")

# ============================================================================
# STARTUP - configuration, log level and feed handlers are set up once, fail-fast
# ============================================================================

config = get_config()
LoggerFactory.set_default_level(config.effective_log_level)
logger.info("🚀 Package feed service starting", extra={'custom_dimensions': debug_config()})

feed_registry = create_feed_registry(config)
feed_trigger = FeedTrigger(feed_registry)

logger.info(f"   Registered feeds: {feed_registry.names()}")

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


@app.route(route="livez", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def livez(req: func.HttpRequest) -> func.HttpResponse:
    """Liveness probe - is the app alive? No dependencies checked."""
    return livez_trigger.handle_request(req)


@app.route(route="feeds/{feed_name}", methods=["GET", "PUT", "POST"])
async def feeds(req: func.HttpRequest) -> func.HttpResponse:
    """Package upload, fetch-and-add and validation for one feed."""
    return await feed_trigger.handle_request_async(req)
