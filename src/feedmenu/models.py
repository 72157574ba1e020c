"""Data models for feedmenu."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, IntEnum
from typing import Callable, Hashable


class FeedFormat(Enum):
    """Syndication format of a feed document, chosen once at the root."""

    RSS = "rss"
    ATOM = "atom"


class Ordering(IntEnum):
    """Relative position of two items in a feed's item list."""

    BEFORE = -1
    SAME = 0
    AFTER = 1


@dataclass(frozen=True)
class Item:
    """Represents a single normalized entry from a feed."""

    title: str = ""
    author: str = ""
    content: str = ""
    stripped_content: str = ""
    link: str | None = None
    comments: str | None = None
    published: datetime | None = None
    updated: datetime | None = None
    notified: bool = False
    viewed: bool = False

    def compare_by_published(self, other: "Item") -> Ordering:
        """Compare two items by list position: newest first, undated last."""
        if self.published == other.published:
            return Ordering.SAME
        if self.published is None:
            return Ordering.AFTER
        if other.published is None:
            return Ordering.BEFORE
        return Ordering.BEFORE if self.published > other.published else Ordering.AFTER


IdentityKey = Callable[[Item], Hashable]


def identity_key(item: Item) -> Hashable:
    """Key that recognizes the same entry across refreshes.

    The link wins when present; otherwise title and published date together.
    """
    if item.link:
        return ("link", item.link)
    return ("title", item.title, item.published)


def mark_viewed(item: Item) -> Item:
    return item if item.viewed else replace(item, viewed=True)


def mark_notified(item: Item) -> Item:
    return item if item.notified else replace(item, notified=True)
