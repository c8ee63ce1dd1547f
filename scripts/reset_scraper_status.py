"""Reset a country stuck in Running back to Initiate so it is dispatched again."""

from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

load_dotenv()

from scraper_status.models import ProcessStatus
from scraper_status.scraper_status import get_state, upsert_state

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def reset_country(country: str, force: bool = False) -> bool:
    state = get_state(country)
    if state != ProcessStatus.RUNNING.value and not force:
        logger.info("%s is %s, not Running; use --force to reset anyway", country, state)
        return False

    if not upsert_state(country, ProcessStatus.INITIATE):
        return False
    logger.info("Reset %s from %s to %s", country, state, ProcessStatus.INITIATE.value)
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Reset countries to Initiate.")
    parser.add_argument("countries", nargs="+", help="Country names to reset")
    parser.add_argument("--force", action="store_true", help="Reset even if not Running")
    args = parser.parse_args()

    for country in args.countries:
        reset_country(country, force=args.force)


if __name__ == "__main__":
    main()
