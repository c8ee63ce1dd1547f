"""Read and upsert per-country processing state.

Neither operation raises: reads degrade to "unknown"/"error" and writes
report success as a bool so callers never abort on a state-store outage.
"""

import logging

from sqlalchemy import func, select

from common.datetime import ensure_utc, utc_now
from rds_postgres.connection import dialect_insert, get_session
from rds_postgres.models import ScraperStatus
from scraper_status.models import STATE_ERROR, STATE_UNKNOWN, ProcessStatus, ProcessingState

logger = logging.getLogger(__name__)


def get_state(country: str) -> str:
    """
    Get the processing state for a country (case-insensitive match).

    Returns:
        The stored status string, "unknown" if there is no record, or
        "error" if the read fails.
    """
    try:
        with get_session() as session:
            stmt = (
                select(ScraperStatus.process_state)
                .where(func.lower(ScraperStatus.country) == country.lower())
                .limit(1)
            )
            state = session.execute(stmt).scalar_one_or_none()
    except Exception as e:
        logger.error("Error fetching processing state for %s: %s", country, e)
        return STATE_ERROR

    if state is None:
        return STATE_UNKNOWN
    return state


def upsert_state(
    country: str,
    status: ProcessStatus,
    proxy_call_count: int | None = None,
) -> bool:
    """
    Upsert the processing state for a country.

    Always sets status and last_updated; proxy_call_count is only written
    when provided, otherwise the stored count is preserved.

    Returns:
        True if the write succeeded, False if it failed (already logged).
    """
    status_value = ProcessStatus(status).value
    values = {
        "country": country,
        "process_state": status_value,
        "last_updated": utc_now(),
    }
    if proxy_call_count is not None:
        values["proxy_call_count"] = proxy_call_count

    try:
        with get_session() as session:
            stmt = dialect_insert(session, ScraperStatus).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["country"],
                set_={key: value for key, value in values.items() if key != "country"},
            )
            session.execute(stmt)
            session.commit()
    except Exception as e:
        logger.error("Error upserting processing state for %s: %s", country, e)
        return False

    logger.info(
        "Upserted processing state for %s: %s, ProxyCallCount: %s",
        country,
        status_value,
        proxy_call_count if proxy_call_count is not None else "N/A",
    )
    return True


def list_states() -> list[ProcessingState]:
    """Load every stored processing state, ordered by country."""
    with get_session() as session:
        rows = session.execute(select(ScraperStatus).order_by(ScraperStatus.country)).scalars().all()

    return [
        ProcessingState(
            country=row.country,
            status=row.process_state,
            last_updated=ensure_utc(row.last_updated),
            proxy_call_count=row.proxy_call_count,
        )
        for row in rows
    ]
