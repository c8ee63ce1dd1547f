import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from crawl_country.models import CrawlRun

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
        "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
    ),
    "accept-language": "en-US,en;q=0.9",
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
    ),
}


def build_session(pool_size: int) -> requests.Session:
    """Create a session whose connection pool matches the story fan-out."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class PageFetcher:
    """GET pages through a proxy, counting every attempt against the run."""

    def __init__(
        self,
        run: CrawlRun,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
        pool_size: int = 16,
    ):
        self.run = run
        self.timeout = timeout
        self.session = session or build_session(pool_size)

    def fetch(
        self,
        url: str,
        proxy: str,
        params: Optional[dict[str, str]] = None,
    ) -> Optional[str]:
        """
        Fetch a page as text.

        Returns None on any transport error, HTTP error status or
        undecodable body; the caller decides how to degrade.
        """
        if not proxy:
            logger.warning("No proxy available, cannot fetch %s", url)
            return None

        self.run.record_proxy_call()
        try:
            response = self.session.get(
                url,
                params=params,
                headers=DEFAULT_HEADERS,
                proxies={"http": proxy, "https": proxy},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            logger.warning("Error in sending request to %s: %s", url, e)
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning("Could not decode response from %s: %s", url, e)
        return None
