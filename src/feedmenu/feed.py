"""Feed controller: owns a feed's items and drives refresh cycles."""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from feedmenu import models
from feedmenu.feed_parser import DocumentFormatError, parse_document
from feedmenu.merge import merge
from feedmenu.models import IdentityKey, Item, identity_key
from feedmenu.transport import HttpTransport, Transport, TransportError

logger = logging.getLogger(__name__)

Observer = Callable[["Feed"], None]


class FeedState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    MERGED = "merged"
    FAILED = "failed"


class Feed:
    """A syndicated feed with a merged, newest-first list of items.

    ``refresh()`` runs one fetch-parse-merge cycle as an asyncio task. A new
    refresh cancels the one in flight; a superseded cycle never applies its
    result. Each cycle that finishes, successfully or not, notifies every
    observer exactly once. All methods must be called from the event loop
    thread.
    """

    def __init__(
        self,
        url: str,
        transport: Transport | None = None,
        key: IdentityKey = identity_key,
    ):
        self._url = url
        self._transport = transport or HttpTransport()
        self._key = key
        self._items: tuple[Item, ...] = ()
        self._observers: list[Observer] = []
        self._pending: asyncio.Task | None = None
        self._generation = 0
        self.state = FeedState.IDLE
        self.title = ""
        self.last_error: str | None = None
        self.last_refreshed: datetime | None = None
        self.warnings: list[str] = []

    @property
    def url(self) -> str:
        return self._url

    @url.setter
    def url(self, value: str) -> None:
        if value == self._url:
            return
        self._cancel_pending()
        self._url = value
        self._items = ()
        self.title = ""
        self.state = FeedState.IDLE

    @property
    def items(self) -> tuple[Item, ...]:
        return self._items

    def unnotified(self) -> list[Item]:
        return [item for item in self._items if not item.notified]

    # --- Observers ---

    def add_observer(self, observer: Observer) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _announce(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception:
                logger.exception("Observer %r failed for feed %s", observer, self._url)

    # --- Flag updates ---

    def mark_viewed(self, item: Item) -> None:
        """Flag the item sharing ``item``'s identity as viewed."""
        self._replace(item, models.mark_viewed)

    def mark_notified(self, item: Item) -> None:
        """Flag the item sharing ``item``'s identity as notified."""
        self._replace(item, models.mark_notified)

    def _replace(self, item: Item, update: Callable[[Item], Item]) -> None:
        target = self._key(item)
        self._items = tuple(
            update(current) if self._key(current) == target else current
            for current in self._items
        )

    # --- Refresh ---

    def refresh(self) -> asyncio.Task:
        """Start a refresh cycle, superseding any cycle still in flight.

        Returns the task running the cycle; awaiting it is optional.
        """
        self._cancel_pending()
        task = asyncio.create_task(self._refresh(self._generation))
        self._pending = task
        return task

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            logger.debug("Cancelling in-flight refresh of %s", self._url)
            self._pending.cancel()
        self._pending = None
        self._generation += 1

    async def _refresh(self, generation: int) -> None:
        self.state = FeedState.FETCHING
        url = self._url
        try:
            data = await self._transport.fetch(url)
        except TransportError as e:
            if generation == self._generation:
                self._fail(str(e))
            return
        except Exception as e:
            if generation == self._generation:
                self._fail(f"Unexpected error: {e}")
            return

        if generation != self._generation:
            logger.debug("Discarding superseded fetch of %s", url)
            return

        self.state = FeedState.PARSING
        try:
            parsed = parse_document(data)
            merged = merge(self._items, parsed.items, key=self._key)
        except DocumentFormatError as e:
            self._fail(str(e))
            return
        except Exception as e:
            self._fail(f"Unexpected error: {e}")
            return

        self._items = merged
        self.title = parsed.title or self.title
        self.warnings = parsed.warnings
        self.last_error = None
        self.last_refreshed = datetime.now(timezone.utc)
        self._pending = None
        self.state = FeedState.MERGED
        logger.info(
            "Feed '%s': %d items (%d parsed)",
            self.title or url, len(self._items), len(parsed.items),
        )
        self._announce()
        self.state = FeedState.IDLE

    def _fail(self, message: str) -> None:
        logger.warning("Feed '%s' error: %s", self.title or self._url, message)
        self.last_error = message
        self._pending = None
        self.state = FeedState.FAILED
        self._announce()
        self.state = FeedState.IDLE
