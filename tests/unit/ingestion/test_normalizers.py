"""Tests for aggregator payload normalization."""

from datetime import timezone

import feedparser
import pytest

from newsnexus.services.ingestion.normalizers import (
    normalize_articles,
    normalize_rss_entry,
    parse_pub_date,
)

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>fire - Google News</title>
    <item>
      <title>Warehouse fire in Dayton - Dayton Daily</title>
      <link>https://news.google.com/rss/articles/abc</link>
      <pubDate>Mon, 03 Mar 2025 10:00:00 GMT</pubDate>
      <description>A warehouse burned overnight</description>
      <source url="https://daytondaily.example">Dayton Daily</source>
    </item>
  </channel>
</rss>
"""


class TestParsePubDate:

    def test_iso_with_z_suffix(self):
        parsed = parse_pub_date("2025-03-02T08:30:00Z")
        assert parsed.year == 2025 and parsed.hour == 8
        assert parsed.utcoffset().total_seconds() == 0

    def test_rfc822(self):
        parsed = parse_pub_date("Mon, 03 Mar 2025 10:00:00 GMT")
        assert parsed.day == 3 and parsed.hour == 10

    def test_naive_is_utc(self):
        assert parse_pub_date("2025-03-02 08:30:00").tzinfo == timezone.utc

    def test_empty_is_none(self):
        assert parse_pub_date(None) is None
        assert parse_pub_date("") is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_pub_date("yesterday-ish")


def test_news_api_payload():
    payload = {
        "status": "ok",
        "articles": [
            {
                "source": {"id": None, "name": "Example Times"},
                "author": "J. Doe",
                "title": "Recall announced",
                "description": "Details",
                "url": "https://example.com/recall",
                "urlToImage": "https://example.com/recall.jpg",
                "publishedAt": "2025-03-02T08:30:00Z",
                "content": "Body",
            }
        ],
    }

    [item] = normalize_articles(payload, "NewsAPI")

    assert item.link == "https://example.com/recall"
    assert item.source == "Example Times"
    assert item.author == "J. Doe"
    assert item.url_to_image == "https://example.com/recall.jpg"
    assert item.pub_date == "2025-03-02T08:30:00Z"


def test_gnews_payload():
    payload = {
        "totalArticles": 1,
        "articles": [
            {
                "title": "Storm damage",
                "description": "Roofs lost",
                "content": "Body",
                "url": "https://example.com/storm",
                "image": "https://example.com/storm.jpg",
                "publishedAt": "2025-03-01T00:00:00Z",
                "source": {"name": "Weather Wire", "url": "https://weather.example"},
            }
        ],
    }

    [item] = normalize_articles(payload, "GNews")

    assert item.url_to_image == "https://example.com/storm.jpg"
    assert item.source == "Weather Wire"
    assert item.author is None


def test_rss_entry():
    feed = feedparser.parse(RSS_FEED)

    item = normalize_rss_entry(feed.entries[0])

    assert item.link == "https://news.google.com/rss/articles/abc"
    assert item.title == "Warehouse fire in Dayton - Dayton Daily"
    assert item.description == "A warehouse burned overnight"
    assert item.source == "Dayton Daily"
    assert item.pub_date == "Mon, 03 Mar 2025 10:00:00 GMT"
