"""Deduplicating upsert of topics and articles keyed by native URL.

A stored record is only updated when the incoming record's `modified` is
strictly newer than the stored record's `created`. The comparison base is
`created`, not the stored `modified`: an article first seen long after it was
published is skipped until the source reports a later change, and a record
whose `created` predates its own latest `modified` is rewritten on every
sighting.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select, update

from common.datetime import ensure_utc, utc_now
from rds_postgres.connection import dialect_insert, get_session
from rds_postgres.models import Article, Topic
from store_stories.models import ArticleRecord, TopicRecord, UpsertOutcome

logger = logging.getLogger(__name__)

_MODELS = {
    TopicRecord: Topic,
    ArticleRecord: Article,
}


def resolve_collection_name(template: str, country_slug: str) -> str:
    """Expand a "{slug}" placeholder to get a country-named collection."""
    return template.replace("{slug}", country_slug.lower())


def _select_by_url(model, native_url: str, collection: str) -> dict[str, Any] | None:
    with get_session() as session:
        row = session.execute(
            select(model).where(model.collection == collection, model.native_url == native_url).limit(1)
        ).scalar_one_or_none()
        if row is None:
            return None
        return {column.name: getattr(row, column.name) for column in model.__table__.columns}


def find_by_url(native_url: str, collection: str, model=Article) -> dict[str, Any] | None:
    """
    Find a stored record by exact native URL within a collection.

    Returns:
        Record as a dict of column values, or None if missing or the lookup failed.
    """
    try:
        return _select_by_url(model, native_url, collection)
    except Exception as e:
        logger.error("Error fetching record for URL: %s in collection: %s: %s", native_url, collection, e)
        return None


def is_newer(modified: datetime, existing_created: datetime) -> bool:
    """True if an incoming modification should overwrite the stored record."""
    return ensure_utc(modified) > ensure_utc(existing_created)


def is_up_to_date(native_url: str, modified: datetime, collection: str) -> bool:
    """True if a stored article already covers this modification time."""
    existing = find_by_url(native_url, collection)
    if existing is None:
        return False
    return not is_newer(modified, existing["created"])


def _insert_new(model, document: dict[str, Any]) -> UpsertOutcome:
    with get_session() as session:
        stmt = dialect_insert(session, model).values(**document).on_conflict_do_nothing()
        inserted = session.execute(stmt).rowcount > 0
        session.commit()

    if inserted:
        logger.info("Inserted new record for URL: %s in collection: %s", document["native_url"], document["collection"])
        return UpsertOutcome.INSERTED

    logger.info("Record for URL: %s was inserted concurrently, leaving it", document["native_url"])
    return UpsertOutcome.UNCHANGED


def _update_existing(model, record, collection: str) -> UpsertOutcome:
    document = record.to_document()
    changes = {name: document[name] for name in record.MUTABLE_FIELDS}

    with get_session() as session:
        # Guard on created so a concurrent writer cannot apply an older change
        stmt = (
            update(model)
            .where(
                model.collection == collection,
                model.native_url == record.native_url,
                model.created < changes["modified"],
            )
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
        updated = session.execute(stmt).rowcount > 0
        session.commit()

    if updated:
        logger.info("Updated record for URL: %s in collection: %s", record.native_url, collection)
        return UpsertOutcome.UPDATED
    return UpsertOutcome.UNCHANGED


def upsert(record: TopicRecord | ArticleRecord, collection: str) -> UpsertOutcome:
    """
    Insert a record, or update its mutable fields if it is newer.

    New records get `created = now`; `created` and the identity fields are
    never changed by an update. Failures are logged and reported as
    UpsertOutcome.FAILED instead of raised.
    """
    model = _MODELS[type(record)]

    try:
        existing = _select_by_url(model, record.native_url, collection)

        if existing is None:
            document = record.to_document()
            document["collection"] = collection
            document["created"] = utc_now()
            return _insert_new(model, document)

        if not is_newer(record.modified, existing["created"]):
            logger.info("No update required for URL: %s as the existing record is more recent", record.native_url)
            return UpsertOutcome.UNCHANGED

        return _update_existing(model, record, collection)
    except Exception as e:
        logger.error("Error in upsert for URL: %s in collection: %s: %s", record.native_url, collection, e)
        return UpsertOutcome.FAILED
