"""Entry point for feedmenu: python -m feedmenu [URL]"""

import asyncio
import logging
import os
import sys

from feedmenu.feed import Feed
from feedmenu.poller import start_polling

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
# Quiet noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger("feedmenu")


def main() -> None:
    url = sys.argv[1] if len(sys.argv) > 1 else os.environ.get("RSS_FEED_URL")
    if not url:
        print("Usage: python -m feedmenu URL (or set RSS_FEED_URL)", file=sys.stderr)
        sys.exit(2)

    feed = Feed(url)
    try:
        asyncio.run(start_polling(feed))
    except KeyboardInterrupt:
        logger.info("Stopped polling %s", url)


if __name__ == "__main__":
    main()
