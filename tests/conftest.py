import os

# Must be set before settings is imported by any test module
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CRAWL_REQUEST_DELAY_MS", "0")

import pytest

from fetcher import FetchedPage
from settings import CrawlConfig


class FakeFetcher:
    """Serves pages from a dict keyed by URL. URLs in `errors` raise instead."""

    def __init__(self, pages=None, sitemaps=None, errors=(), redirects=None):
        self.pages = pages or {}
        self.sitemaps = sitemaps or {}
        self.errors = set(errors)
        self.redirects = redirects or {}
        self.requested = []

    def fetch_page(self, url):
        self.requested.append(url)
        if url in self.errors:
            raise RuntimeError(f"boom: {url}")
        body = self.pages.get(url)
        if body is None:
            return None
        return FetchedPage(
            url=url,
            final_url=self.redirects.get(url, url),
            status_code=200,
            content_type='text/html',
            body=body,
        )

    def fetch_sitemap(self, url):
        return self.sitemaps.get(url)


def html_page(title='', links=(), body='', headings=(), head=''):
    heading_html = ''.join(f"<h2>{heading}</h2>" for heading in headings)
    link_html = ''.join(f'<a href="{link}">{link}</a>' for link in links)
    return (
        f"<html><head><title>{title}</title>{head}</head>"
        f"<body>{heading_html}<p>{body}</p>{link_html}</body></html>"
    )


@pytest.fixture
def crawl_config():
    return CrawlConfig(max_pages=20, concurrency=3, request_delay=0)
