"""
Randomized catalog factories — anti-overfitting design.

Every factory call generates randomized non-identity fields (summaries,
hosts, timestamps) so tests cannot rely on specific default values.
"""

import random
import string
from datetime import datetime, timezone, timedelta


def _random_suffix(length: int = 6) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def _random_timestamp() -> datetime:
    offset = random.randint(0, 30 * 24 * 3600)
    return datetime.now(timezone.utc).replace(microsecond=0) - timedelta(seconds=offset)


def random_version() -> str:
    return ".".join(str(random.randint(0, 20)) for _ in range(4))


def make_canonical_name(name: str = None, version: str = None, **overrides):
    """
    Build a CanonicalName with a random name/version unless fixed.
    """
    from core.models.catalog import CanonicalName

    base = {
        "name": name or f"pkg-{_random_suffix()}",
        "flavor": random.choice(["", "[vc10]", "[vc11]"]),
        "version": version or random_version(),
        "architecture": random.choice(["x86", "x64", "any"]),
    }
    base.update(overrides)
    return CanonicalName(**base)


def make_location(host: str = None, canonical_name=None) -> str:
    host = host or f"mirror-{_random_suffix(4)}.example.test"
    leaf = canonical_name.artifact_name(".msi") if canonical_name else f"{_random_suffix()}.msi"
    return f"https://{host}/{leaf}"


def make_catalog_entry(canonical_name=None, locations=None, **overrides):
    """
    Build a CatalogEntry with one random live-looking location.
    """
    from core.models.catalog import CatalogEntry, FeedLink

    canonical_name = canonical_name or make_canonical_name()
    base = {
        "canonical_name": canonical_name,
        "title": canonical_name.name,
        "summary": f"Summary {_random_suffix(12)}",
        "updated": _random_timestamp(),
        "feeds": [],
        "locations": list(locations) if locations is not None else [make_location(canonical_name=canonical_name)],
        "links": [FeedLink(href=f"https://docs.example.test/{canonical_name.name}", rel="related")],
    }
    base.update(overrides)
    return CatalogEntry(**base)


def make_package_metadata(canonical_name=None, summary: str = None):
    from core.models.package import PackageMetadata

    canonical_name = canonical_name or make_canonical_name()
    return PackageMetadata(
        canonical_name=canonical_name,
        display_name=canonical_name.name,
        summary=summary if summary is not None else f"Package {_random_suffix(10)}",
    )
