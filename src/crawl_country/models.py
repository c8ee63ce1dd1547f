"""Data models for the crawl_country pipeline stage."""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class TaskMessage:
    """A queued request to crawl one country."""
    country: str
    slug: str


@dataclass
class CategoryItem:
    """A category menu entry resolved from the home page."""
    name: str
    source_path: str
    resolved_url: str


@dataclass
class StoryLink:
    """A story-cluster anchor found on a category page."""
    href: str
    markup: str


@dataclass
class ParsedArticle:
    """Fields scraped from one article node of a story page."""
    url: str
    title: str
    provider: str
    provider_logo_url: str
    time_text: str
    image_url: str
    modified: Optional[datetime]


@dataclass
class CrawlRun:
    """Counters for one crawl invocation, shared by its story threads."""
    country: str
    slug: str
    proxy_calls: int = 0
    articles_saved: int = 0
    stories_failed: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_proxy_call(self) -> int:
        with self._lock:
            self.proxy_calls += 1
            return self.proxy_calls

    def record_article_saved(self) -> None:
        with self._lock:
            self.articles_saved += 1

    def record_story_failure(self) -> None:
        with self._lock:
            self.stories_failed += 1
