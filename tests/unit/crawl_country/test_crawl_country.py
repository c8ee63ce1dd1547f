"""Tests for crawl_country.crawl_country module."""

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests
from news_pages import BASE_URL, article_markup, canada_pages, story_markup
from sqlalchemy import select

from common.config import ProxyConfig, parse_config, reset_config, set_config
from common.hashing import generate_record_id
from crawl_country.crawl_country import CrawlWorker
from crawl_country.models import TaskMessage
from rds_postgres.connection import get_session, reset_engine
from rds_postgres.models import Article, Topic
from scraper_status.models import ProcessStatus
from scraper_status.scraper_status import list_states, upsert_state
from store_stories.store_stories import find_by_url

HOME_URL = f"{BASE_URL}/home?gl=CA&hl=en-CA&ceid=CA:en"
STORY_A = f"{BASE_URL}/stories/abc?hl=en-CA"
STORY_B = f"{BASE_URL}/stories/def?hl=en-CA"
CANADA = TaskMessage(country="Canada", slug="CA")


class FakeResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Serves canned pages by URL; records every request."""

    def __init__(self, pages: dict[str, str], errors: dict[str, Exception] | None = None):
        self.pages = pages
        self.errors = errors or {}
        self.requests: list[tuple[str, dict | None]] = []
        self._lock = threading.Lock()

    def get(self, url, params=None, headers=None, proxies=None, timeout=None):
        with self._lock:
            self.requests.append((url, params))
        if url in self.errors:
            raise self.errors[url]
        if url not in self.pages:
            return FakeResponse("", 404)
        return FakeResponse(self.pages[url])

    def close(self) -> None:
        pass


def _config():
    config = parse_config(
        {
            "countries": ["Canada"],
            "crawl": {"base_url": BASE_URL, "max_story_workers": 2},
            "queue": {"renew_interval_seconds": 0.01},
            "store": {"topic_collection": "topics", "article_collection": "articles_{slug}"},
        }
    )
    config.proxy = ProxyConfig(username="user", password="pass")
    return config


def _rows(model, collection: str) -> list:
    with get_session() as session:
        return session.execute(select(model).where(model.collection == collection)).scalars().all()


@pytest.mark.usefixtures("sqlite_db")
class TestCanadaCrawl:
    def test_full_crawl_persists_topics_and_articles(self) -> None:
        session = FakeSession(canada_pages())
        worker = CrawlWorker(_config(), http_session=session)

        with patch("crawl_country.crawl_country.upsert_state", wraps=upsert_state) as spy:
            status = worker.run(CANADA)

        assert status == ProcessStatus.COMPLETED
        assert spy.call_args_list[0].args == ("Canada", ProcessStatus.RUNNING, 0)
        assert spy.call_args_list[-1].args == ("Canada", ProcessStatus.COMPLETED, 4)

        state = list_states()[0]
        assert state.status == "Completed"
        assert state.proxy_call_count == 4

        topic_a = find_by_url(STORY_A, "topics", model=Topic)
        assert topic_a["title"] == "Story A lead"
        assert topic_a["category"] == "World"
        assert topic_a["country"] == "CA"
        assert topic_a["image_url"] == "https://img.example.com/a.jpg"
        topic_b = find_by_url(STORY_B, "topics", model=Topic)
        assert topic_b["image_url"] == "https://news.google.com/api/attachments/b.jpg"

        articles = _rows(Article, "articles_ca")
        assert sorted(a.native_url for a in articles) == [
            "https://a.example.com/1",
            "https://a.example.com/2",
            "https://news.google.com/read/CBMi9",
        ]
        second = find_by_url("https://a.example.com/2", "articles_ca")
        assert second["provider"] == "Daily Paper"
        assert second["topic_id"] == generate_record_id("topics", STORY_A)
        assert second["text"] == "2 hours ago"
        assert second["city"] == "CA"

    def test_story_pages_fetched_once_with_locale_params(self) -> None:
        session = FakeSession(canada_pages())
        CrawlWorker(_config(), http_session=session).run(CANADA)

        story_requests = [r for r in session.requests if "/stories/" in r[0]]
        assert sorted(url for url, _ in story_requests) == [STORY_A, STORY_B]
        assert all(params == {"gl": "CA", "ceid": "CA:en"} for _, params in story_requests)

    def test_home_fetch_failure_marks_failed(self) -> None:
        session = FakeSession(canada_pages(), errors={HOME_URL: requests.ConnectionError("proxy refused")})

        status = CrawlWorker(_config(), http_session=session).run(CANADA)

        assert status == ProcessStatus.FAILED
        state = list_states()[0]
        assert state.status == "Failed"
        assert state.proxy_call_count == 1
        assert _rows(Topic, "topics") == []

    def test_failing_story_does_not_stop_siblings(self) -> None:
        session = FakeSession(canada_pages(), errors={STORY_B: RuntimeError("decoder exploded")})

        status = CrawlWorker(_config(), http_session=session).run(CANADA)

        assert status == ProcessStatus.COMPLETED
        assert find_by_url(STORY_A, "topics", model=Topic) is not None
        topic_b = find_by_url(STORY_B, "topics", model=Topic)
        assert topic_b is not None
        assert topic_b["title"] == ""
        assert len(_rows(Article, "articles_ca")) == 2

    def test_failing_category_does_not_stop_siblings(self) -> None:
        world_url = f"{BASE_URL}/topics/WORLD?hl=en-CA"
        business_url = f"{BASE_URL}/topics/BUSINESS?hl=en-CA"
        story_c = f"{BASE_URL}/stories/ghi"
        pages = canada_pages()
        pages[HOME_URL] = """
        <html><body><div role="menubar">
          <div data-url="./topics/WORLD?hl=en-CA"><a>World</a></div>
          <div data-url="./topics/BUSINESS?hl=en-CA"><a>Business</a></div>
        </div></body></html>
        """
        pages[business_url] = '<html><body><a href="./stories/ghi">Story C</a></body></html>'
        pages[story_c] = story_markup("Top news", [article_markup("https://c.example.com/1", "Story C lead")])
        session = FakeSession(pages, errors={world_url: RuntimeError("bad category")})

        status = CrawlWorker(_config(), http_session=session).run(CANADA)

        assert status == ProcessStatus.COMPLETED
        assert list_states()[0].status == "Completed"
        topic_c = find_by_url(story_c, "topics", model=Topic)
        assert topic_c["category"] == "Business"
        assert find_by_url(STORY_A, "topics", model=Topic) is None
        assert [a.native_url for a in _rows(Article, "articles_ca")] == ["https://c.example.com/1"]

    def test_topic_kept_when_story_page_unparseable(self) -> None:
        with patch("crawl_country.crawl_country.find_representative_articles", side_effect=ValueError("bad xpath")):
            status = CrawlWorker(_config(), http_session=FakeSession(canada_pages())).run(CANADA)

        assert status == ProcessStatus.COMPLETED
        assert len(_rows(Topic, "topics")) == 2
        assert _rows(Article, "articles_ca") == []

    def test_rerun_with_same_modified_keeps_created(self) -> None:
        worker = CrawlWorker(_config(), http_session=FakeSession(canada_pages()))
        worker.run(CANADA)
        first = find_by_url("https://a.example.com/1", "articles_ca")

        worker.run(CANADA)
        second = find_by_url("https://a.example.com/1", "articles_ca")

        assert second["created"] == first["created"]
        assert second["modified"] == first["modified"]
        assert len(_rows(Article, "articles_ca")) == 3
        assert list_states()[0].status == "Completed"

    def test_empty_menu_completes_without_categories(self) -> None:
        session = FakeSession({HOME_URL: "<html><body><p>No menu</p></body></html>"})

        assert CrawlWorker(_config(), http_session=session).run(CANADA) == ProcessStatus.COMPLETED
        assert len(session.requests) == 1

    def test_unresolved_category_page_is_skipped(self) -> None:
        pages = canada_pages()
        del pages[f"{BASE_URL}/topics/WORLD?hl=en-CA"]
        session = FakeSession(pages)

        assert CrawlWorker(_config(), http_session=session).run(CANADA) == ProcessStatus.COMPLETED
        assert _rows(Topic, "topics") == []


@pytest.mark.usefixtures("sqlite_db")
class TestShortCircuit:
    def test_empty_slug_fails_before_fetching(self) -> None:
        session = FakeSession(canada_pages())

        status = CrawlWorker(_config(), http_session=session).run(TaskMessage(country="Atlantis", slug=""))

        assert status == ProcessStatus.FAILED
        assert session.requests == []
        assert list_states()[0].status == "Failed"

    def test_slug_without_proxy_pool_fails_before_fetching(self) -> None:
        session = FakeSession(canada_pages())

        status = CrawlWorker(_config(), http_session=session).run(TaskMessage(country="France", slug="FR"))

        assert status == ProcessStatus.FAILED
        assert session.requests == []


@pytest.mark.usefixtures("sqlite_db")
class TestWorkerBoundary:
    def test_unhandled_error_marks_failed_and_reraises(self) -> None:
        receiver = MagicMock()
        worker = CrawlWorker(_config(), http_session=FakeSession({}))

        with patch.object(CrawlWorker, "scrape_country", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError, match="boom"):
                worker.run(CANADA, receiver)

        assert list_states()[0].status == "Failed"
        receiver.close.assert_called_once()

    def test_failed_state_write_still_reraises(self) -> None:
        worker = CrawlWorker(_config(), http_session=FakeSession({}))

        with patch.object(CrawlWorker, "scrape_country", side_effect=RuntimeError("boom")), \
                patch("crawl_country.crawl_country.upsert_state", return_value=False) as mock_upsert:
            with pytest.raises(RuntimeError, match="boom"):
                worker.run(CANADA)

        assert mock_upsert.call_args.args == ("Canada", ProcessStatus.FAILED, 0)

    def test_invalid_message_dropped_without_state_write(self) -> None:
        receiver = MagicMock()
        worker = CrawlWorker(_config(), http_session=FakeSession({}))

        with patch("crawl_country.crawl_country.upsert_state") as mock_upsert:
            assert worker.run_message('{"CountrySlug": "CA"}', receiver) is False

        mock_upsert.assert_not_called()
        receiver.close.assert_called_once()

    def test_valid_message_runs_and_releases_lease(self) -> None:
        receiver = MagicMock()
        worker = CrawlWorker(_config(), http_session=FakeSession(canada_pages()))

        assert worker.run_message('{"Country": "Canada", "CountrySlug": "CA"}', receiver) is True

        receiver.close.assert_called_once()
        assert list_states()[0].status == "Completed"


class TestStoreUnavailable:
    def test_original_error_raised_when_state_store_unconfigured(self, monkeypatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        reset_engine()
        worker = CrawlWorker(_config(), http_session=FakeSession({}))

        with patch.object(CrawlWorker, "scrape_country", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError, match="boom"):
                worker.run(CANADA)

        reset_engine()


class TestDefaultConfig:
    def test_uses_shared_config_when_none_given(self) -> None:
        config = _config()
        set_config(config)
        try:
            assert CrawlWorker(http_session=FakeSession({})).config is config
        finally:
            reset_config()
