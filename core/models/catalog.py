# ============================================================================
# CATALOG MODELS
# ============================================================================
# STATUS: Core - feed document data model
# PURPOSE: Canonical package identity, catalog entries and feed documents
# EXPORTS: CanonicalName, FeedLink, CatalogEntry, FeedDocument, parse_version,
#          dedupe_urls
# DEPENDENCIES: pydantic, datetime
# ============================================================================
"""
Catalog Models.

A feed is an ordered list of CatalogEntry records. Each entry is one
package build identified by its CanonicalName (name, flavor, version,
architecture) and carries the feeds it is published in, the URLs the
artifact can be downloaded from, and any related links.

Identity rules:
    - name, flavor and architecture compare case-insensitively
    - versions are four-part dotted numbers compared numerically;
      missing parts count as 0 ("1.2" == "1.2.0.0")
    - two names that match on everything but version describe the same
      package at different versions (differs_only_by_version)
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


VERSION_PARTS = 4


def parse_version(version: str) -> Tuple[int, ...]:
    """
    Parse a dotted version into a four-part integer tuple.

    Raises:
        ValueError: Empty version, more than four parts, or non-numeric part
    """
    if version is None or not str(version).strip():
        raise ValueError("version is required")
    parts = str(version).strip().split(".")
    if len(parts) > VERSION_PARTS:
        raise ValueError(f"version '{version}' has more than {VERSION_PARTS} parts")
    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        raise ValueError(f"version '{version}' is not numeric")
    if any(n < 0 for n in numbers):
        raise ValueError(f"version '{version}' has a negative part")
    numbers.extend([0] * (VERSION_PARTS - len(numbers)))
    return tuple(numbers)


def dedupe_urls(urls: Iterable[str]) -> List[str]:
    """Order-preserving de-duplication; first occurrence wins."""
    seen = set()
    result = []
    for url in urls:
        if url and url not in seen:
            seen.add(url)
            result.append(url)
    return result


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# CANONICAL NAME
# ============================================================================

class CanonicalName(BaseModel):
    """
    Canonical identity of one package build.

    Immutable and hashable so it can key dicts and sets.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Package name")
    flavor: str = Field(default="", description="Build flavor, e.g. '[vc10]' (may be empty)")
    version: str = Field(description="Four-part dotted version")
    architecture: str = Field(min_length=1, description="Target architecture, e.g. 'x64', 'any'")

    @field_validator("version")
    @classmethod
    def _validate_version(cls, value: str) -> str:
        parse_version(value)
        return value.strip()

    @property
    def version_tuple(self) -> Tuple[int, ...]:
        return parse_version(self.version)

    @property
    def key(self) -> Tuple[str, str, Tuple[int, ...], str]:
        """Case-folded identity used for equality across entries."""
        return (self.name.lower(), self.flavor.lower(), self.version_tuple, self.architecture.lower())

    def same_identity(self, other: "CanonicalName") -> bool:
        return self.key == other.key

    def differs_only_by_version(self, other: "CanonicalName") -> bool:
        """True when name, flavor and architecture all match."""
        return (
            self.name.lower() == other.name.lower()
            and self.flavor.lower() == other.flavor.lower()
            and self.architecture.lower() == other.architecture.lower()
        )

    def is_older_than(self, other: "CanonicalName") -> bool:
        return self.version_tuple < other.version_tuple

    @property
    def normalized_version(self) -> str:
        """Four-part version string, e.g. '1.0' -> '1.0.0.0'."""
        return ".".join(str(part) for part in self.version_tuple)

    def artifact_name(self, extension: str) -> str:
        """
        Deterministic, lower-cased artifact file name.

        The version is normalized to four parts, so every spelling of one
        identity maps to the same file.

        Example:
            CanonicalName(name="zlib", flavor="[vc10]", version="1.2.5",
                          architecture="x86").artifact_name(".msi")
            → "zlib[vc10]-1.2.5.0-x86.msi"
        """
        return f"{self.name}{self.flavor}-{self.normalized_version}-{self.architecture}{extension}".lower()

    def __str__(self) -> str:
        return f"{self.name}{self.flavor}-{self.version}-{self.architecture}"


# ============================================================================
# FEED LINK
# ============================================================================

class FeedLink(BaseModel):
    """Metadata link bound to a URL (Atom <link>)."""
    href: str = Field(min_length=1)
    rel: str = Field(default="alternate")
    media_type: Optional[str] = Field(default=None, description="Atom 'type' attribute")
    title: Optional[str] = None


# ============================================================================
# CATALOG ENTRY
# ============================================================================

class CatalogEntry(BaseModel):
    """
    One package version's published record within a feed.

    feeds / locations are ordered, most preferred first. An entry with no
    locations is not feed-worthy.
    """
    canonical_name: CanonicalName
    package_id: Optional[str] = Field(default=None, description="Atom entry id")
    title: Optional[str] = None
    summary: Optional[str] = None
    updated: datetime = Field(default_factory=_utc_now)
    feeds: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    links: List[FeedLink] = Field(default_factory=list)

    @property
    def entry_id(self) -> str:
        return self.package_id or str(self.canonical_name)

    @property
    def has_locations(self) -> bool:
        return bool(self.locations)

    def ensure_feed(self, feed_url: str) -> None:
        """Insert feed_url at the front unless already present."""
        if feed_url not in self.feeds:
            self.feeds.insert(0, feed_url)

    def ensure_location(self, location: str) -> None:
        """Insert location at the front unless already present."""
        if location not in self.locations:
            self.locations.insert(0, location)


# ============================================================================
# FEED DOCUMENT
# ============================================================================

class FeedDocument(BaseModel):
    """
    Ordered collection of CatalogEntries for one named feed.

    add() replaces an entry of identical canonical identity in place, so a
    document never holds two entries for the same build.
    """
    feed_id: Optional[str] = None
    title: Optional[str] = None
    updated: datetime = Field(default_factory=_utc_now)
    entries: List[CatalogEntry] = Field(default_factory=list)

    def add(self, entry: CatalogEntry) -> None:
        for index, existing in enumerate(self.entries):
            if existing.canonical_name.same_identity(entry.canonical_name):
                self.entries[index] = entry
                return
        self.entries.append(entry)

    def find(self, canonical_name: CanonicalName) -> Optional[CatalogEntry]:
        for entry in self.entries:
            if entry.canonical_name.same_identity(canonical_name):
                return entry
        return None

    def remove(self, canonical_name: CanonicalName) -> Optional[CatalogEntry]:
        """Remove and return the entry with this identity, if any."""
        for index, existing in enumerate(self.entries):
            if existing.canonical_name.same_identity(canonical_name):
                return self.entries.pop(index)
        return None

    def identities(self) -> List[Tuple[str, str, Tuple[int, ...], str]]:
        return [entry.canonical_name.key for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries
