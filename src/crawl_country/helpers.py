"""Helper functions for crawl_country: task messages and CLI arguments."""

from __future__ import annotations

import argparse
import json

from common.cli_helpers import add_config_argument, parse_positive_int
from crawl_country.models import TaskMessage


class InvalidTaskMessage(ValueError):
    """A queued message that can never be processed and must not be retried."""


def parse_task_message(body: str | bytes | None) -> TaskMessage:
    """Parse a queued {"Country": ..., "CountrySlug": ...} message.

    The slug may be empty (unresolvable country); both keys must be present.

    Raises:
        InvalidTaskMessage: If the body is not a JSON object with both fields.
    """
    if body is None:
        raise InvalidTaskMessage("empty message body")

    try:
        data = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise InvalidTaskMessage(f"message body is not JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise InvalidTaskMessage("message body is not a JSON object")

    country = data.get("Country")
    slug = data.get("CountrySlug")
    if not isinstance(country, str) or not country.strip():
        raise InvalidTaskMessage("missing Country")
    if not isinstance(slug, str):
        raise InvalidTaskMessage("missing CountrySlug")

    return TaskMessage(country=country.strip(), slug=slug.strip())


def parse_crawl_country_args() -> argparse.Namespace:
    '''Parse CLI arguments for crawl_country.'''

    parser = argparse.ArgumentParser(description="Consume crawl tasks from the queue")
    add_config_argument(parser)
    parser.add_argument(
        "--country",
        default=None,
        help="Crawl this country directly instead of consuming the queue",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Poll the queue once and exit",
    )
    parser.add_argument(
        "--max-messages",
        type=lambda v: parse_positive_int(v, "max-messages"),
        default=None,
        help="Stop after handling this many messages (default: run forever)",
    )
    return parser.parse_args()
