"""Data models for scraped topics and articles."""

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from common.datetime import ensure_utc


@dataclass
class TopicRecord:
    """A story cluster, persisted even when it has no qualifying article."""
    id: str
    title: str
    category: str
    country: str
    city: str
    native_url: str
    image_url: str
    modified: datetime
    created: Optional[datetime] = None

    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ("title", "image_url", "modified")

    def to_document(self) -> dict[str, Any]:
        return _to_document(self)


@dataclass
class ArticleRecord:
    """A representative article within a topic's top coverage section."""
    id: str
    topic_id: str
    title: str
    category: str
    provider: str
    provider_logo_url: str
    text: str
    country: str
    city: str
    native_url: str
    url: str
    image_url: str
    modified: datetime
    meta: str = ""
    created: Optional[datetime] = None

    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = (
        "title",
        "provider",
        "provider_logo_url",
        "text",
        "image_url",
        "meta",
        "modified",
    )

    def to_document(self) -> dict[str, Any]:
        return _to_document(self)


class UpsertOutcome(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


def _to_document(record) -> dict[str, Any]:
    """Convert a record to column values, normalizing timestamps to UTC."""
    document = asdict(record)
    for key, value in document.items():
        if isinstance(value, datetime):
            document[key] = ensure_utc(value)
    if document.get("created") is None:
        document.pop("created", None)
    return document
