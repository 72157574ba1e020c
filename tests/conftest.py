"""Shared test fixtures for feedmenu tests."""

import asyncio
from datetime import datetime, timezone

import pytest

from feedmenu.models import Item


FEED_URL = "https://example.com/feed.xml"

SAMPLE_RSS_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com</link>
    <description>A test RSS feed</description>
    <item>
      <title>First Article</title>
      <link>https://example.com/article-1</link>
      <guid>article-1</guid>
      <description>Description of the first article</description>
      <content:encoded><![CDATA[<p>First <em>full</em> article</p>]]></content:encoded>
      <dc:creator>Alice</dc:creator>
      <comments>https://example.com/article-1#comments</comments>
      <pubDate>Fri, 13 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/article-2</link>
      <guid>article-2</guid>
      <description>&lt;b&gt;Description&lt;/b&gt; of the second article</description>
      <author>bob@example.com (Bob)</author>
      <pubDate>Fri, 13 Feb 2026 09:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Badly Dated Article</title>
      <link>https://example.com/article-3</link>
      <description>Has a broken date</description>
      <pubDate>sometime last week</pubDate>
    </item>
    <item>
    </item>
  </channel>
</rss>"""

SAMPLE_ATOM_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Test Atom Feed</title>
  <link href="https://example.com"/>
  <subtitle>A test Atom feed</subtitle>
  <entry>
    <title>Atom Entry 1</title>
    <link rel="replies" type="text/html" href="https://example.com/entry-1/comments"/>
    <link rel="alternate" href="https://example.com/entry-1"/>
    <id>urn:uuid:entry-1</id>
    <author><name>Carol</name></author>
    <summary>Summary of entry 1</summary>
    <content type="html">&lt;p&gt;Content of   entry 1&lt;/p&gt;</content>
    <published>2026-02-13T10:00:00Z</published>
    <updated>2026-02-14T08:30:00+02:00</updated>
  </entry>
  <entry>
    <title>Atom Entry 2</title>
    <link href="https://example.com/entry-2"/>
    <id>urn:uuid:entry-2</id>
    <summary>Summary of entry 2</summary>
    <updated>2026-02-13T11:00:00Z</updated>
  </entry>
</feed>"""

SAMPLE_MALFORMED_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Malformed Feed</title>
    <item>
      <title>Bad Item</title>
      <!-- Missing closing tags intentionally -->
"""

SAMPLE_NOT_A_FEED_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<html>
  <body>This is not a feed</body>
</html>"""


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_item(link=None, published=None, content="", **kwargs) -> Item:
    return Item(
        link=link,
        published=published,
        content=content,
        stripped_content=content,
        **kwargs,
    )


class FakeTransport:
    """Transport returning queued responses; exceptions are raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class GatedTransport:
    """Transport whose fetches block until the test resolves their gate."""

    def __init__(self, ignore_cancel: bool = False):
        self.gates: list[asyncio.Future] = []
        self.ignore_cancel = ignore_cancel

    async def fetch(self, url: str) -> bytes:
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        while True:
            try:
                return await asyncio.shield(gate)
            except asyncio.CancelledError:
                if not self.ignore_cancel:
                    raise


@pytest.fixture
def sample_rss_xml():
    """Sample valid RSS 2.0 XML."""
    return SAMPLE_RSS_XML


@pytest.fixture
def sample_atom_xml():
    """Sample valid Atom XML."""
    return SAMPLE_ATOM_XML


@pytest.fixture
def sample_malformed_xml():
    """Sample malformed RSS XML."""
    return SAMPLE_MALFORMED_XML


@pytest.fixture
def sample_not_a_feed_xml():
    """Sample XML that is not a feed."""
    return SAMPLE_NOT_A_FEED_XML
