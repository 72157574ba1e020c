"""RSS/Atom document parsing and entry normalization."""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime

from bs4 import BeautifulSoup

from feedmenu.dates import DateParseError, DateParser, parse_date
from feedmenu.models import FeedFormat, Item

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

XHTML_NS = "http://www.w3.org/1999/xhtml"


@dataclass
class ParsedDocument:
    """Result of parsing an RSS/Atom document."""

    format: FeedFormat
    title: str
    items: list[Item]
    warnings: list[str]


class DocumentFormatError(Exception):
    """Raised when a document is not valid XML or not a recognized feed."""


class NormalizationError(Exception):
    """Raised when an element has nothing usable as a feed entry."""


def strip_markup(text: str) -> str:
    """Render markup as plain text with collapsed whitespace."""
    if not text:
        return ""
    plain = BeautifulSoup(text, "html.parser").get_text(" ")
    return _WHITESPACE.sub(" ", plain).strip()


def parse_document(data: bytes) -> ParsedDocument:
    """Parse a feed document and normalize every entry in it.

    Entries that cannot be normalized are skipped and reported in
    ``warnings``; date problems are reported there too.

    Raises:
        DocumentFormatError: If the bytes are not XML or the root element
            is neither an RSS nor an ATOM document.
    """
    try:
        root = ET.fromstring(data)
    except (ET.ParseError, LookupError, ValueError) as e:
        raise DocumentFormatError(f"Document is not valid XML: {e}") from e

    fmt = detect_format(root)
    if fmt is FeedFormat.RSS:
        channel = _child(root, "channel")
        title = _text(channel, "title") if channel is not None else ""
        elements = [el for el in root.iter() if _local(el.tag) == "item"]
    else:
        title = _text(root, "title")
        elements = _children(root, "entry")

    warnings: list[str] = []
    items = []
    for position, element in enumerate(elements, start=1):
        try:
            items.append(normalize(element, fmt, warnings=warnings))
        except NormalizationError as e:
            logger.warning("Skipping entry %d: %s", position, e)
            warnings.append(f"Skipping entry {position}: {e}")

    return ParsedDocument(format=fmt, title=title, items=items, warnings=warnings)


def detect_format(root: ET.Element) -> FeedFormat:
    """Pick the feed format from the shape of the root element."""
    tag = _local(root.tag)
    if tag == "feed":
        return FeedFormat.ATOM
    if tag in ("rss", "RDF") and (
        _child(root, "channel") is not None or _child(root, "item") is not None
    ):
        return FeedFormat.RSS
    raise DocumentFormatError(f"Unrecognized feed root element <{tag}>")


def normalize(
    element: ET.Element,
    fmt: FeedFormat,
    date_parser: DateParser = parse_date,
    warnings: list[str] | None = None,
) -> Item:
    """Convert one RSS ``item`` or ATOM ``entry`` element to an Item."""
    if fmt is FeedFormat.RSS:
        return item_from_rss_element(element, date_parser, warnings)
    return item_from_atom_element(element, date_parser, warnings)


def item_from_rss_element(
    element: ET.Element,
    date_parser: DateParser = parse_date,
    warnings: list[str] | None = None,
) -> Item:
    """Build an Item from an RSS ``<item>`` element.

    Raises:
        NormalizationError: If the element has no title, link or content.
    """
    _expect(element, "item")

    link = _text(element, "link") or _permalink(element) or None
    content = _text(element, "encoded") or _text(element, "description")
    published = _date(element, "pubDate", FeedFormat.RSS, date_parser, warnings)
    if published is None and _child(element, "pubDate") is None:
        published = _date(element, "date", FeedFormat.ATOM, date_parser, warnings)

    return _build(
        title=_text(element, "title"),
        author=_text(element, "author") or _text(element, "creator"),
        content=content,
        link=link,
        comments=_text(element, "comments") or None,
        published=published,
        updated=None,
    )


def item_from_atom_element(
    element: ET.Element,
    date_parser: DateParser = parse_date,
    warnings: list[str] | None = None,
) -> Item:
    """Build an Item from an ATOM ``<entry>`` element.

    The link is the ``href`` of the alternate link; an entry without a
    ``published`` date is ordered by its ``updated`` date.

    Raises:
        NormalizationError: If the element has no title, link or content.
    """
    _expect(element, "entry")

    updated = _date(element, "updated", FeedFormat.ATOM, date_parser, warnings)
    if _child(element, "published") is not None:
        published = _date(element, "published", FeedFormat.ATOM, date_parser, warnings)
    else:
        published = updated

    author = _child(element, "author")

    return _build(
        title=_text(element, "title"),
        author=_text(author, "name") if author is not None else "",
        content=_text(element, "content") or _text(element, "summary"),
        link=_atom_link(element, "alternate"),
        comments=_atom_link(element, "replies"),
        published=published,
        updated=updated,
    )


def _build(**fields) -> Item:
    if not (fields["title"] or fields["link"] or fields["content"]):
        raise NormalizationError("Entry has no title, link or content")
    return Item(stripped_content=strip_markup(fields["content"]), **fields)


def _expect(element: ET.Element, name: str) -> None:
    if _local(element.tag) != name:
        raise NormalizationError(
            f"Expected <{name}> element, got <{_local(element.tag)}>"
        )


def _local(tag) -> str:
    """Tag name without its namespace."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _text(element: ET.Element, name: str) -> str:
    """Stripped text of the first non-empty child named ``name``, or ``""``."""
    for child in _children(element, name):
        if len(child):
            # Inline XHTML content keeps its markup
            parts = [child.text or ""]
            parts.extend(_serialize(sub) for sub in child)
            text = "".join(parts).strip()
        else:
            text = (child.text or "").strip()
        if text:
            return text
    return ""


def _serialize(element: ET.Element) -> str:
    """Markup of an inline element, with XHTML as the unprefixed namespace."""
    try:
        return ET.tostring(element, encoding="unicode", default_namespace=XHTML_NS)
    except ValueError:
        # Unqualified tags cannot be written with a default namespace
        return ET.tostring(element, encoding="unicode")


def _permalink(element: ET.Element) -> str:
    guid = _child(element, "guid")
    if guid is None or guid.get("isPermaLink", "true").lower() == "false":
        return ""
    value = (guid.text or "").strip()
    return value if value.startswith(("http://", "https://")) else ""


def _atom_link(element: ET.Element, rel: str) -> str | None:
    for link in _children(element, "link"):
        if link.get("rel", "alternate") == rel and link.get("href"):
            return link.get("href").strip()
    return None


def _date(
    element: ET.Element,
    name: str,
    fmt: FeedFormat,
    date_parser: DateParser,
    warnings: list[str] | None,
) -> datetime | None:
    """Parse a date child; missing is None, malformed is None plus a warning."""
    raw = _text(element, name)
    if not raw:
        return None
    try:
        return date_parser(raw, fmt)
    except DateParseError as e:
        logger.warning("Ignoring <%s> date: %s", name, e)
        if warnings is not None:
            warnings.append(f"Ignoring <{name}> date: {e}")
        return None
