"""Logging helpers that attach the crawled country to every message."""

import logging
from typing import Any


class CountryLogger(logging.LoggerAdapter):
    """Prefix log messages with the country being processed."""

    def __init__(self, logger: logging.Logger, country: str):
        super().__init__(logger, {"country": country})

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        return f"[{self.extra['country']}] {msg}", kwargs
