import logging
from dataclasses import dataclass
from typing import Optional

import requests
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

from settings import CrawlConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchedPage:
    url: str
    final_url: str
    status_code: int
    content_type: str
    body: str


class PageFetcher:
    """Plain HTTP GET with a fixed user agent, a per-request timeout and retries on transport errors."""

    def __init__(self, config: Optional[CrawlConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or CrawlConfig()
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': self.config.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        })
        self._retrying = Retrying(
            stop=stop_after_attempt(max(1, self.config.max_retries)),
            wait=wait_exponential(multiplier=self.config.retry_backoff, max=10),
            retry=retry_if_exception_type((
                requests.exceptions.ConnectionError,
                requests.exceptions.Timeout,
            )),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def _get(self, url):
        return self._retrying(
            self.session.get, url, timeout=self.config.request_timeout, allow_redirects=True
        )

    def fetch_page(self, url) -> Optional[FetchedPage]:
        """Return the page, or None for transport errors, non-2xx answers and non-HTML content."""
        try:
            response = self._get(url)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Failed to fetch {url}: {e}")
            return None

        if not 200 <= response.status_code < 300:
            logger.info(f"Skipping {url}: HTTP {response.status_code}")
            return None

        content_type = response.headers.get('Content-Type', '')
        if 'text/html' not in content_type:
            logger.debug(f"Skipping {url}: content type {content_type!r}")
            return None

        return FetchedPage(
            url=url,
            final_url=response.url or url,
            status_code=response.status_code,
            content_type=content_type,
            body=response.text,
        )

    def fetch_sitemap(self, url) -> Optional[str]:
        try:
            response = self._get(url)
        except requests.exceptions.RequestException as e:
            logger.debug(f"Sitemap fetch failed for {url}: {e}")
            return None
        if not 200 <= response.status_code < 300:
            return None
        return response.text

    def close(self):
        self.session.close()
