"""Helper functions for dispatch_countries."""

from __future__ import annotations

import argparse

from common.cli_helpers import add_config_argument


def parse_dispatch_countries_args() -> argparse.Namespace:
    '''Parse CLI arguments for dispatch_countries.'''

    parser = argparse.ArgumentParser(description="Enqueue crawl tasks for configured countries")
    add_config_argument(parser)
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Keep dispatching every dispatch.interval_seconds instead of running once",
    )
    return parser.parse_args()
