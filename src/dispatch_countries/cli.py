"""CLI for dispatching crawl tasks to the queue."""

from __future__ import annotations

import logging
import os
import time

from dotenv import load_dotenv

from common.cli_helpers import setup_logging
from common.config import load_config
from dispatch_countries.dispatch_countries import dispatch_countries
from dispatch_countries.helpers import parse_dispatch_countries_args
from rds_postgres.connection import ensure_tables

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def main() -> None:
    args = parse_dispatch_countries_args()

    config = load_config(args.config)
    ensure_tables()

    queue_url = os.environ.get("SQS_QUEUE_URL")
    if not queue_url:
        raise SystemExit("SQS_QUEUE_URL is not set")

    while True:
        dispatch_countries(config.countries, queue_url)
        if not args.loop:
            break
        logger.info("Sleeping %ds until next dispatch", config.dispatch.interval_seconds)
        time.sleep(config.dispatch.interval_seconds)


if __name__ == "__main__":
    main()
