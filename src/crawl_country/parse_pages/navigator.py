"""Thin XPath navigator over lxml HTML trees."""

from __future__ import annotations

import logging
from typing import Optional

from lxml import etree, html

logger = logging.getLogger(__name__)


class HtmlNavigator:
    """Query an HTML document or fragment with XPath.

    Every query returns an empty result instead of raising when nothing
    matches, so page parsers can degrade gracefully on layout changes.
    """

    def __init__(self, element):
        self.element = element

    @classmethod
    def from_html(cls, markup: Optional[str]) -> Optional[HtmlNavigator]:
        """Parse markup, returning None for empty or unparseable input."""
        if not markup or not markup.strip():
            return None
        try:
            return cls(html.fromstring(markup))
        except (etree.ParserError, ValueError) as e:
            logger.warning("Could not parse HTML: %s", e)
            return None

    def select(self, xpath: str) -> list[HtmlNavigator]:
        """All elements matching xpath, relative to this node."""
        return [HtmlNavigator(node) for node in self.element.xpath(xpath) if isinstance(node, etree._Element)]

    def select_one(self, xpath: str) -> Optional[HtmlNavigator]:
        nodes = self.select(xpath)
        return nodes[0] if nodes else None

    def attr(self, name: str) -> str:
        return self.element.get(name) or ""

    def text(self) -> str:
        """Stripped text content of this node and its descendants."""
        return self.element.text_content().strip()

    def texts(self, xpath: str) -> list[str]:
        """String results of an xpath, stripped, empties dropped."""
        values = self.element.xpath(xpath)
        if not isinstance(values, list):
            values = [values]
        results = []
        for value in values:
            if isinstance(value, etree._Element):
                value = value.text_content()
            value = str(value).strip()
            if value:
                results.append(value)
        return results

    def first_value(self, xpath: str) -> str:
        """First non-empty string result of an xpath, or ""."""
        values = self.texts(xpath)
        return values[0] if values else ""

    def joined_text(self, xpath: str) -> str:
        """All text results of an xpath joined with single spaces."""
        return " ".join(" ".join(self.texts(xpath)).split())

    def outer_html(self) -> str:
        return html.tostring(self.element, encoding="unicode", with_tail=False)
