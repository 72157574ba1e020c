"""Background polling loop for feedmenu."""

import asyncio
import logging
import os

from feedmenu.feed import Feed
from feedmenu.models import Item

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 900  # 15 minutes


async def poll_feed_once(feed: Feed) -> list[Item]:
    """Refresh the feed once and surface items not yet notified.

    Returns the surfaced items, newest first. Nothing is surfaced when the
    refresh fails or another refresh supersedes it.
    """
    task = feed.refresh()
    await asyncio.wait({task})
    if task.cancelled():
        logger.info("Refresh of %s superseded; skipping this cycle", feed.url)
        return []
    task.result()
    if feed.last_error is not None:
        return []

    new_items = feed.unnotified()
    for item in new_items:
        logger.info("New item in '%s': %s <%s>", feed.title, item.title, item.link or "")
        feed.mark_notified(item)
    return new_items


async def start_polling(feed: Feed, interval: int | None = None) -> None:
    """Run the polling loop indefinitely."""
    if interval is None:
        interval = int(os.environ.get("RSS_POLL_INTERVAL", DEFAULT_POLL_INTERVAL))
    logger.info("Poller started for %s (interval: %ds)", feed.url, interval)

    while True:
        try:
            new_items = await poll_feed_once(feed)
            if new_items:
                logger.info("Poll cycle complete: %d new items", len(new_items))
        except Exception as e:
            logger.error("Poll cycle failed: %s", e)

        await asyncio.sleep(interval)
