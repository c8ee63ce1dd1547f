"""
Crawl one country's news: home page -> categories -> story clusters -> articles.

Each invocation marks the country Running, scrapes every category with a
bounded fan-out over its stories, persists topics and articles through the
dedup store, and finishes by recording Completed or Failed along with the
number of proxied requests it made.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

import requests

from common.config import Config, get_config
from common.datetime import utc_now
from common.hashing import generate_record_id
from common.log_context import CountryLogger
from crawl_country.fetch_pages.fetch_page import PageFetcher, build_session
from crawl_country.fetch_pages.proxies import select_proxy
from crawl_country.helpers import InvalidTaskMessage, parse_task_message
from crawl_country.lease import LeaseRenewer
from crawl_country.models import CategoryItem, CrawlRun, ParsedArticle, StoryLink, TaskMessage
from crawl_country.parse_pages.category import find_story_links, resolve_story_url
from crawl_country.parse_pages.home import build_home_url, find_menu_entries, locale_params, resolve_category
from crawl_country.parse_pages.navigator import HtmlNavigator
from crawl_country.parse_pages.story import find_representative_articles, parse_article_node
from scraper_status.models import ProcessStatus
from scraper_status.scraper_status import upsert_state
from store_stories.models import ArticleRecord, TopicRecord, UpsertOutcome
from store_stories.store_stories import is_up_to_date, resolve_collection_name, upsert

logger = logging.getLogger(__name__)


class CrawlWorker:
    """Runs crawl tasks; one worker can serve many queue messages."""

    def __init__(self, config: Optional[Config] = None, http_session: Optional[requests.Session] = None):
        self.config = config or get_config()
        self.http_session = http_session

    def run_message(self, body, receiver=None) -> bool:
        """
        Parse a queued task and run it.

        Returns:
            False if the message is invalid and was dropped, True once the
            crawl has finished (whatever its outcome).
        """
        try:
            task = parse_task_message(body)
        except InvalidTaskMessage as e:
            logger.error("Dropping invalid task message: %s", e)
            if receiver is not None:
                receiver.close()
            return False

        self.run(task, receiver)
        return True

    def run(self, task: TaskMessage, receiver=None) -> ProcessStatus:
        """
        Crawl one country, keeping the message lease alive while it runs.

        Unexpected errors mark the country Failed and are re-raised so the
        message is redelivered.
        """
        run = CrawlRun(country=task.country, slug=task.slug)
        log = CountryLogger(logger, task.country)
        cancel = threading.Event()
        renewer = None
        owns_session = self.http_session is None
        session = self.http_session or build_session(self.config.crawl.max_story_workers)

        try:
            upsert_state(task.country, ProcessStatus.RUNNING, run.proxy_calls)
            if receiver is not None:
                renewer = LeaseRenewer(receiver, cancel, self.config.queue.renew_interval_seconds).start()

            fetcher = PageFetcher(run, timeout=self.config.fetch.timeout_seconds, session=session)
            status = self.scrape_country(run, fetcher)

            upsert_state(task.country, status, run.proxy_calls)
            log.info(
                "Crawl finished: %s, proxy calls: %d, articles saved: %d, failed stories: %d",
                status.value,
                run.proxy_calls,
                run.articles_saved,
                run.stories_failed,
            )
            return status
        except Exception as e:
            log.error("Error processing country: %s", e)
            if not upsert_state(task.country, ProcessStatus.FAILED, run.proxy_calls):
                log.error("Could not record Failed state after error")
            raise
        finally:
            if renewer is not None:
                renewer.stop()
            else:
                cancel.set()
            if owns_session:
                session.close()

    def _proxy(self, run: CrawlRun) -> str:
        return select_proxy(run.slug, self.config.proxy.username, self.config.proxy.password)

    def scrape_country(self, run: CrawlRun, fetcher: PageFetcher) -> ProcessStatus:
        """Discover the category menu and crawl each category in page order."""
        log = CountryLogger(logger, run.country)

        if not run.slug:
            log.warning("No country slug, skipping crawl")
            return ProcessStatus.FAILED

        proxy = self._proxy(run)
        if not proxy:
            log.warning("No proxy configured for slug %s, skipping crawl", run.slug)
            return ProcessStatus.FAILED

        base_url = self.config.crawl.base_url
        home_html = fetcher.fetch(build_home_url(base_url, run.slug), proxy)
        home = HtmlNavigator.from_html(home_html)
        if home is None:
            log.error("Could not load home page")
            return ProcessStatus.FAILED

        entries = find_menu_entries(home)
        if not entries:
            log.warning("No category menu entries found on home page")
            return ProcessStatus.COMPLETED

        for entry in entries:
            try:
                category = resolve_category(entry, base_url)
                if category is None:
                    continue
                log.info("Processing category: %s", category.name)
                self.parse_category(run, fetcher, category)
            except Exception as e:
                log.error("Error processing category menu %s: %s", entry.outer_html(), e)

        return ProcessStatus.COMPLETED

    def parse_category(self, run: CrawlRun, fetcher: PageFetcher, category: CategoryItem) -> None:
        """Fan out over the category's stories; one story failing never stops the rest."""
        log = CountryLogger(logger, run.country)

        page = HtmlNavigator.from_html(fetcher.fetch(category.resolved_url, self._proxy(run)))
        if page is None:
            log.warning("Could not load category page %s", category.resolved_url)
            return

        links = find_story_links(page)
        if not links:
            log.info("No stories found in category %s", category.name)
            return

        max_workers = min(self.config.crawl.max_story_workers, len(links))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self.process_story, run, fetcher, category, link): link
                for link in links
            }
            for future in as_completed(futures):
                link = futures[future]
                try:
                    future.result()
                except Exception as e:
                    run.record_story_failure()
                    log.error("Error processing story %s: %s", link.markup, e)

    def process_story(
        self,
        run: CrawlRun,
        fetcher: PageFetcher,
        category: CategoryItem,
        link: StoryLink,
    ) -> None:
        """Persist the story's topic, then each of its representative articles.

        The topic is saved even when the story page cannot be read.
        """
        story_url = resolve_story_url(self.config.crawl.base_url, link.href)

        topic_collection = resolve_collection_name(self.config.store.topic_collection, run.slug)
        topic_id = generate_record_id(topic_collection, story_url)

        articles = self.read_story(run, fetcher, story_url)

        lead = articles[0] if articles else None
        topic = TopicRecord(
            id=topic_id,
            title=lead.title if lead else "",
            category=category.name,
            country=run.slug,
            city=run.slug,
            native_url=story_url,
            image_url=lead.image_url if lead else "",
            modified=utc_now(),
        )
        upsert(topic, topic_collection)

        for article in articles:
            self.save_article(run, category, topic_id, article)

    def read_story(self, run: CrawlRun, fetcher: PageFetcher, story_url: str) -> list[ParsedArticle]:
        """Fetch a story page and parse its representative articles ([] on any error)."""
        log = CountryLogger(logger, run.country)
        base_url = self.config.crawl.base_url

        try:
            params = locale_params(run.slug, story_url)
            page = HtmlNavigator.from_html(fetcher.fetch(story_url, self._proxy(run), params=params))
            if page is None:
                log.warning("Could not load story page %s", story_url)
                return []

            articles: list[ParsedArticle] = []
            for node in find_representative_articles(page, self.config.crawl.section_labels):
                article = parse_article_node(node, base_url)
                if article is None:
                    log.warning("Skipping article without a link in story %s", story_url)
                    continue
                articles.append(article)
            return articles
        except Exception as e:
            run.record_story_failure()
            log.error("Error reading story page %s: %s", story_url, e)
            return []

    def save_article(
        self,
        run: CrawlRun,
        category: CategoryItem,
        topic_id: str,
        article: ParsedArticle,
    ) -> Optional[UpsertOutcome]:
        """Upsert one article unless the store already has this modification."""
        log = CountryLogger(logger, run.country)
        collection = resolve_collection_name(self.config.store.article_collection, run.slug)

        if article.modified is None:
            log.warning("Skipping article without a publish time: %s", article.url)
            return None

        if is_up_to_date(article.url, article.modified, collection):
            log.info("Article already up to date: %s", article.url)
            return None

        record = ArticleRecord(
            id=generate_record_id(collection, article.url),
            topic_id=topic_id,
            title=article.title,
            category=category.name,
            provider=article.provider,
            provider_logo_url=article.provider_logo_url,
            text=article.time_text,
            country=run.slug,
            city=run.slug,
            native_url=article.url,
            url=article.url,
            image_url=article.image_url,
            modified=article.modified,
            meta="",
        )
        outcome = upsert(record, collection)
        if outcome in (UpsertOutcome.INSERTED, UpsertOutcome.UPDATED):
            run.record_article_saved()
        return outcome
