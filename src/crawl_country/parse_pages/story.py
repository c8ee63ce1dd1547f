"""Story page parsing: the representative article list of a cluster."""

from __future__ import annotations

from typing import Optional, Sequence
from urllib.parse import urljoin

from common.datetime import parse_datetime
from crawl_country.models import ParsedArticle
from crawl_country.parse_pages.navigator import HtmlNavigator

SECTION_ARTICLES_XPATH = (
    '//h2[contains(text(),"{label}")]'
    "/ancestor::div[1]/parent::div[1]/following-sibling::div/article"
)


def find_representative_articles(page: HtmlNavigator, labels: Sequence[str]) -> list[HtmlNavigator]:
    """
    Article nodes under the first section heading that has any.

    Labels are tried in order; returns an empty list if none match.
    """
    for label in labels:
        nodes = page.select(SECTION_ARTICLES_XPATH.format(label=label))
        if nodes:
            return nodes
    return []


def first_srcset_url(srcset: str) -> str:
    """First URL of a srcset attribute ("url 1x, url 2x")."""
    if not srcset:
        return ""
    first = srcset.split(",")[0].strip()
    return first.split(" ")[0] if first else ""


def parse_article_node(node: HtmlNavigator, base_url: str) -> Optional[ParsedArticle]:
    """Extract one article; returns None when it has no link."""
    url = node.first_value("./a/@href")
    if not url:
        return None
    if url.startswith("./"):
        url = base_url + url[1:]

    time_node = node.select_one("./div//time")
    time_text = time_node.text() if time_node is not None else ""
    modified = parse_datetime(time_node.attr("datetime")) if time_node is not None else None

    image = first_srcset_url(node.first_value("./figure/img/@srcset"))

    return ParsedArticle(
        url=url,
        title=node.joined_text("./h4/a//text()"),
        provider=node.joined_text("./div/img/following-sibling::div[1]/a//text()"),
        provider_logo_url=first_srcset_url(node.first_value("./div/img/@srcset")),
        time_text=time_text,
        image_url=urljoin(base_url, image) if image else "",
        modified=modified,
    )
