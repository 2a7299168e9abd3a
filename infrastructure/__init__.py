"""
Infrastructure Package - Lazy Loading Implementation.

Adapters and repositories are imported only when first accessed, so
importing this package from function_app.py neither reads environment
variables nor builds Azure clients before the Functions host is ready.

Exports (lazy):
    RepositoryFactory
    IBlobRepository, BlobRepository
    ILivenessProber, LivenessProber
    IFeedCodec, AtomFeedCodec
    IPackageValidator, load_package_validator
    INotificationSink, WebhookNotificationSink, BitlyShortener, compose_announcement
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .factory import RepositoryFactory as _RepositoryFactory
    from .blob import IBlobRepository as _IBlobRepository
    from .blob import BlobRepository as _BlobRepository
    from .liveness import ILivenessProber as _ILivenessProber
    from .liveness import LivenessProber as _LivenessProber
    from .feed_codec import IFeedCodec as _IFeedCodec
    from .feed_codec import AtomFeedCodec as _AtomFeedCodec


_LAZY_EXPORTS = {
    "RepositoryFactory": ".factory",
    "IBlobRepository": ".blob",
    "BlobRepository": ".blob",
    "ILivenessProber": ".liveness",
    "LivenessProber": ".liveness",
    "IFeedCodec": ".feed_codec",
    "AtomFeedCodec": ".feed_codec",
    "IPackageValidator": ".package_validator",
    "load_package_validator": ".package_validator",
    "INotificationSink": ".notification",
    "WebhookNotificationSink": ".notification",
    "BitlyShortener": ".notification",
    "compose_announcement": ".notification",
}


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

    import importlib
    module = importlib.import_module(module_name, __name__)
    return getattr(module, name)


__all__ = list(_LAZY_EXPORTS)
