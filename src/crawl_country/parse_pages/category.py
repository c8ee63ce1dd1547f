"""Category page parsing: story-cluster links."""

from __future__ import annotations

from crawl_country.models import StoryLink
from crawl_country.parse_pages.navigator import HtmlNavigator

STORY_LINK_XPATH = "//a[contains(@href, './stories')]"


def find_story_links(page: HtmlNavigator) -> list[StoryLink]:
    """Story anchors of a category page, captured as plain values."""
    return [
        StoryLink(href=anchor.attr("href"), markup=anchor.outer_html())
        for anchor in page.select(STORY_LINK_XPATH)
    ]


def resolve_story_url(base_url: str, href: str) -> str:
    """Absolute story URL: leading dots are stripped from the href."""
    return base_url + href.lstrip(".")
