"""Print the processing state of every crawled country."""

from __future__ import annotations

import logging

from dotenv import load_dotenv


def _format_value(value: object) -> str:
    return str(value) if value is not None else "None"


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    logger = logging.getLogger(__name__)

    load_dotenv()

    from scraper_status.scraper_status import list_states

    states = list_states()

    logger.info("Fetched %d country states", len(states))
    for state in states:
        print(f"country: {state.country}")
        print(f"process_state: {state.status}")
        print(f"last_updated: {_format_value(state.last_updated)}")
        print(f"proxy_call_count: {_format_value(state.proxy_call_count)}")
        print("-" * 40)


if __name__ == "__main__":
    main()
