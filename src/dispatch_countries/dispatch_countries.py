"""Enqueue one crawl task per country whose last run is not in progress."""

import logging
from dataclasses import dataclass, field

from common.countries import get_country_slug
from common.log_context import CountryLogger
from common.sqs import get_sqs_client, send_task_message
from scraper_status.models import STATE_UNKNOWN, CountryKey, ProcessStatus
from scraper_status.scraper_status import get_state

logger = logging.getLogger(__name__)

# Never-seen countries ("unknown") are treated as Initiate
ADMITTED_STATES = frozenset(
    {
        ProcessStatus.INITIATE.value,
        ProcessStatus.COMPLETED.value,
        ProcessStatus.FAILED.value,
        STATE_UNKNOWN,
    }
)


@dataclass
class DispatchResult:
    enqueued: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def build_task_message(key: CountryKey) -> dict[str, str]:
    return {"Country": key.country, "CountrySlug": key.slug}


def dispatch_countries(countries: list[str], queue_url: str, client=None) -> DispatchResult:
    """
    Run one dispatch tick.

    A failure for one country is logged and recorded in the result; the
    remaining countries are still dispatched.
    """
    sqs = client or get_sqs_client()
    result = DispatchResult()

    for country in countries:
        log = CountryLogger(logger, country)
        try:
            state = get_state(country)
            if state not in ADMITTED_STATES:
                log.info("Skipping task. Current state: %s", state)
                result.skipped.append(country)
                continue

            key = CountryKey(country=country, slug=get_country_slug(country))
            message_id = send_task_message(queue_url, build_task_message(key), label=country, client=sqs)
            log.info("Enqueued task (message %s, previous state: %s)", message_id, state)
            result.enqueued.append(country)
        except Exception as e:
            log.error("Error enqueueing task: %s", e)
            result.failed.append(country)

    logger.info(
        "Dispatch finished: %d enqueued, %d skipped, %d failed",
        len(result.enqueued),
        len(result.skipped),
        len(result.failed),
    )
    return result
