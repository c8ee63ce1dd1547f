"""SQLAlchemy models for crawler state and scraped stories."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ScraperStatus(Base):
    """One processing-state row per crawled country."""

    __tablename__ = "scraper_status"

    country: Mapped[str] = mapped_column(String(128), primary_key=True)
    process_state: Mapped[str] = mapped_column(String(32), nullable=False)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    proxy_call_count: Mapped[int | None] = mapped_column(Integer, nullable=True)


class Topic(Base):
    """A story cluster discovered on a category page."""

    __tablename__ = "topics"
    __table_args__ = (UniqueConstraint("collection", "native_url", name="uq_topics_collection_url"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    collection: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    country: Mapped[str] = mapped_column(String(8), nullable=False)
    city: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    native_url: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    modified: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Article(Base):
    """A representative article selected from a story cluster."""

    __tablename__ = "articles"
    __table_args__ = (UniqueConstraint("collection", "native_url", name="uq_articles_collection_url"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    collection: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    topic_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    provider: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    provider_logo_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    country: Mapped[str] = mapped_column(String(8), nullable=False)
    city: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    native_url: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    modified: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    meta: Mapped[str] = mapped_column(Text, nullable=False, default="")
