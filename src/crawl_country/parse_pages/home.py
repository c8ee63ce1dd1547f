"""Home page parsing: country locale and category menu."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from crawl_country.models import CategoryItem
from crawl_country.parse_pages.navigator import HtmlNavigator

logger = logging.getLogger(__name__)

MENU_ENTRY_XPATH = "//*[@role='menubar']/div[contains(@data-url,'./topic')]"


def locale_params(country_slug: str, url: str = "") -> dict[str, str]:
    """Query parameters that pin a page to a country's English edition.

    Keys already present in url's query string are left out.
    """
    slug = country_slug.upper()
    params = {"hl": f"en-{slug}", "gl": slug, "ceid": f"{slug}:en"}
    present = parse_qs(urlsplit(url).query, keep_blank_values=True)
    return {key: value for key, value in params.items() if key not in present}


def build_home_url(base_url: str, country_slug: str) -> str:
    slug = country_slug.upper()
    return f"{base_url}/home?gl={slug}&hl=en-{slug}&ceid={slug}:en"


def find_menu_entries(page: HtmlNavigator) -> list[HtmlNavigator]:
    """Category entries of the home page menu bar, in page order."""
    return page.select(MENU_ENTRY_XPATH)


def resolve_category(entry: HtmlNavigator, base_url: str) -> Optional[CategoryItem]:
    """
    Build a category from a menu entry.

    Returns None when the entry has no relative "./" link.
    """
    name = entry.joined_text("./a//text()")
    link = entry.attr("data-url")
    if not link.startswith("./"):
        logger.info("Skipping menu entry %r without a relative link: %r", name, link)
        return None
    return CategoryItem(name=name, source_path=link, resolved_url=base_url + link[1:])
