# ============================================================================
# ATOM FEED CODEC
# ============================================================================
# STATUS: Infrastructure - feed document serialization
# PURPOSE: FeedDocument <-> Atom XML with a package extension namespace
# EXPORTS: IFeedCodec, AtomFeedCodec, ATOM_NS, PACKAGE_NS
# DEPENDENCIES: xml.etree.ElementTree
# ============================================================================

"""
Atom Feed Codec.

Document layout:

    <feed xmlns="http://www.w3.org/2005/Atom"
          xmlns:pkg="urn:package-feed:extensions">
      <id>https://feeds.example.org/current</id>
      <title>current</title>
      <updated>2024-05-01T12:00:00+00:00</updated>
      <entry>
        <id>zlib[vc10]-1.2.5.0-x86</id>
        <title>zlib</title>
        <updated>...</updated>
        <summary>Compression library</summary>
        <link href="https://example.org/zlib" rel="alternate" type="text/html"/>
        <pkg:package name="zlib" flavor="[vc10]" version="1.2.5.0" architecture="x86">
          <pkg:feed>https://feeds.example.org/current</pkg:feed>
          <pkg:location>https://cdn.example.org/zlib[vc10]-1.2.5.0-x86.msi</pkg:location>
        </pkg:package>
      </entry>
    </feed>

Anything that cannot be read back as this layout raises FeedFormatError.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional
from xml.etree import ElementTree as ET

from pydantic import ValidationError

from core.models.catalog import CanonicalName, CatalogEntry, FeedDocument, FeedLink
from exceptions import FeedFormatError
from util_logger import LoggerFactory, ComponentType
from .local_files import atomic_write_bytes

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "AtomFeedCodec")

ATOM_NS = "http://www.w3.org/2005/Atom"
PACKAGE_NS = "urn:package-feed:extensions"

ET.register_namespace("", ATOM_NS)
ET.register_namespace("pkg", PACKAGE_NS)

_NS = {"atom": ATOM_NS, "pkg": PACKAGE_NS}


def _atom(tag: str) -> str:
    return f"{{{ATOM_NS}}}{tag}"


def _pkg(tag: str) -> str:
    return f"{{{PACKAGE_NS}}}{tag}"


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    if not text or not text.strip():
        return None
    raw = text.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise FeedFormatError(f"Invalid timestamp: '{text}'")


class IFeedCodec(ABC):
    """Serializer for feed documents."""

    @abstractmethod
    def dumps(self, document: FeedDocument) -> bytes:
        pass

    @abstractmethod
    def loads(self, data: bytes) -> FeedDocument:
        pass

    def read(self, path: str) -> FeedDocument:
        """
        Raises:
            FileNotFoundError: No file at path
            FeedFormatError: File is not a valid feed document
        """
        with open(path, "rb") as f:
            return self.loads(f.read())

    def write(self, document: FeedDocument, path: str) -> None:
        atomic_write_bytes(path, self.dumps(document))


class AtomFeedCodec(IFeedCodec):
    """Atom 1.0 serializer with the pkg: extension element."""

    # ========================================================================
    # ENCODING
    # ========================================================================

    def dumps(self, document: FeedDocument) -> bytes:
        root = ET.Element(_atom("feed"))
        if document.feed_id:
            ET.SubElement(root, _atom("id")).text = document.feed_id
        if document.title:
            ET.SubElement(root, _atom("title")).text = document.title
        ET.SubElement(root, _atom("updated")).text = _format_timestamp(document.updated)

        for entry in document.entries:
            root.append(self._encode_entry(entry))

        ET.indent(root)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    def _encode_entry(self, entry: CatalogEntry) -> ET.Element:
        element = ET.Element(_atom("entry"))
        ET.SubElement(element, _atom("id")).text = entry.entry_id
        ET.SubElement(element, _atom("title")).text = entry.title or entry.canonical_name.name
        ET.SubElement(element, _atom("updated")).text = _format_timestamp(entry.updated)
        if entry.summary:
            ET.SubElement(element, _atom("summary")).text = entry.summary

        for link in entry.links:
            attrs = {"href": link.href, "rel": link.rel}
            if link.media_type:
                attrs["type"] = link.media_type
            if link.title:
                attrs["title"] = link.title
            ET.SubElement(element, _atom("link"), attrs)

        name = entry.canonical_name
        package = ET.SubElement(element, _pkg("package"), {
            "name": name.name,
            "flavor": name.flavor,
            "version": name.version,
            "architecture": name.architecture,
        })
        for feed in entry.feeds:
            ET.SubElement(package, _pkg("feed")).text = feed
        for location in entry.locations:
            ET.SubElement(package, _pkg("location")).text = location
        return element

    # ========================================================================
    # DECODING
    # ========================================================================

    def loads(self, data: bytes) -> FeedDocument:
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise FeedFormatError(f"Feed document is not well-formed XML: {e}")

        if root.tag != _atom("feed"):
            raise FeedFormatError(f"Root element is {root.tag}, expected Atom feed")

        document = FeedDocument(
            feed_id=root.findtext("atom:id", default=None, namespaces=_NS),
            title=root.findtext("atom:title", default=None, namespaces=_NS),
        )
        updated = _parse_timestamp(root.findtext("atom:updated", default=None, namespaces=_NS))
        if updated is not None:
            document.updated = updated

        for element in root.findall("atom:entry", _NS):
            document.add(self._decode_entry(element))

        logger.debug(f"Decoded feed '{document.feed_id}' with {len(document)} entries")
        return document

    def _decode_entry(self, element: ET.Element) -> CatalogEntry:
        package = element.find("pkg:package", _NS)
        if package is None:
            raise FeedFormatError("Entry has no pkg:package element")

        try:
            canonical_name = CanonicalName(
                name=package.get("name", ""),
                flavor=package.get("flavor", ""),
                version=package.get("version", ""),
                architecture=package.get("architecture", ""),
            )
            links = [
                FeedLink(
                    href=link.get("href", ""),
                    rel=link.get("rel", "alternate"),
                    media_type=link.get("type"),
                    title=link.get("title"),
                )
                for link in element.findall("atom:link", _NS)
            ]
        except ValidationError as e:
            raise FeedFormatError(f"Invalid package entry: {e}")

        entry = CatalogEntry(
            canonical_name=canonical_name,
            package_id=element.findtext("atom:id", default=None, namespaces=_NS),
            title=element.findtext("atom:title", default=None, namespaces=_NS),
            summary=element.findtext("atom:summary", default=None, namespaces=_NS),
            feeds=[(f.text or "").strip() for f in package.findall("pkg:feed", _NS) if f.text],
            locations=[(l.text or "").strip() for l in package.findall("pkg:location", _NS) if l.text],
            links=links,
        )
        updated = _parse_timestamp(element.findtext("atom:updated", default=None, namespaces=_NS))
        if updated is not None:
            entry.updated = updated
        return entry
