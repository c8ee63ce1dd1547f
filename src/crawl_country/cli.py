"""CLI for crawling countries from the task queue."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from common.cli_helpers import setup_logging
from common.config import load_config, set_config
from common.countries import get_country_slug
from crawl_country.consume_queue import consume_messages
from crawl_country.crawl_country import CrawlWorker
from crawl_country.helpers import parse_crawl_country_args
from crawl_country.models import TaskMessage
from rds_postgres.connection import ensure_tables

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def main() -> None:
    args = parse_crawl_country_args()

    config = load_config(args.config)
    set_config(config)
    ensure_tables()

    worker = CrawlWorker()

    if args.country:
        task = TaskMessage(country=args.country, slug=get_country_slug(args.country))
        status = worker.run(task)
        logger.info("Crawl of %s finished with status %s", args.country, status.value)
        return

    queue_url = os.environ.get("SQS_QUEUE_URL")
    if not queue_url:
        raise SystemExit("SQS_QUEUE_URL is not set")

    consume_messages(
        worker,
        queue_url,
        config,
        once=args.once,
        max_messages=args.max_messages,
    )


if __name__ == "__main__":
    main()
