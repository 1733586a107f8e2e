import argparse
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, List, Optional, Sequence
from urllib.parse import urlparse

import brand_identity
from aggregator import aggregate_content
from classifier import PageClassifier
from exceptions import HomepageUnreachableError
from fetcher import PageFetcher
from page_parser import (
    extract_brand_signals,
    extract_navigation,
    host_of,
    is_blacklisted,
    is_same_host,
    iter_navigation,
    make_soup,
    normalize_url,
    parse_sitemap,
    parse_soup,
)
from schema import (
    BlogInfo,
    Confidence,
    CrawledPage,
    CrawlResult,
    ExtractedBrandInfo,
    NavigationItem,
    PageType,
    ServicesInfo,
)
from settings import UNMATCHED_PRIORITY, CrawlConfig, configure_logging, settings

logger = logging.getLogger(__name__)

SERVICE_PAGE_TYPES = (PageType.SERVICE, PageType.PRACTICE_AREA)
BLOG_PAGE_TYPES = (PageType.BLOG, PageType.BLOG_POST)


class Frontier:
    """Queue of not-yet-visited URLs. Membership covers both queued and visited URLs."""

    def __init__(self, accept: Callable[[str], bool]):
        self.accept = accept
        self.visited = set()
        self._queue: List[str] = []
        self._queued = set()

    def __len__(self):
        return len(self._queue)

    def __iter__(self):
        return iter(list(self._queue))

    def __contains__(self, url):
        return url in self._queued or url in self.visited

    def _admissible(self, urls: Iterable[str]) -> List[str]:
        admitted = []
        for raw in urls:
            url = normalize_url(raw) if raw else None
            if url and url not in self.visited and url not in admitted and self.accept(url):
                admitted.append(url)
        return admitted

    def extend(self, urls: Iterable[str]):
        for url in self._admissible(urls):
            if url not in self._queued:
                self._queue.append(url)
                self._queued.add(url)

    def push_front(self, urls: Iterable[str]):
        """Move urls to the head of the queue, keeping their given order."""
        front = self._admissible(urls)
        if not front:
            return
        moved = set(front)
        self._queue = front + [url for url in self._queue if url not in moved]
        self._queued.update(front)

    def next_batch(self, size) -> List[str]:
        batch, self._queue = self._queue[:size], self._queue[size:]
        for url in batch:
            self._queued.discard(url)
            self.visited.add(url)
        return batch

    def mark_visited(self, url):
        self.visited.add(url)


@dataclass
class _CrawlRun:
    """State owned by a single crawl() call."""
    host: str
    origin: str
    frontier: Frontier
    pages: List[CrawledPage] = field(default_factory=list)
    sitemap_found: bool = False
    blog_info: BlogInfo = field(default_factory=BlogInfo)
    services_info: ServicesInfo = field(default_factory=ServicesInfo)
    last_batch_start: float = 0.0


def _append_unique(items: List[str], value):
    if value and value not in items:
        items.append(value)


class SiteCrawler:
    """
    Crawl one site under a page budget and return a CrawlResult.

    The homepage is fetched first for navigation and brand signals, then the
    frontier (navigation links plus sitemap or homepage links) is drained in
    concurrent batches. Per-page failures are logged and skipped; only an
    unreachable homepage fails the run.
    """

    def __init__(self, config: Optional[CrawlConfig] = None, fetcher=None, classifier=None):
        self.config = config or settings.crawl
        self.fetcher = fetcher or PageFetcher(self.config)
        self.classifier = classifier or PageClassifier(self.config.classifier_rules)

    # URL ordering

    def priority(self, url) -> int:
        path = urlparse(url).path.lower() or '/'
        for prefix, rank in self.config.page_priority:
            if path == prefix or (prefix != '/' and path.startswith(prefix + '/')):
                return rank
        return UNMATCHED_PRIORITY

    def prioritize(self, urls: Iterable[str]) -> List[str]:
        unique = list(dict.fromkeys(url for url in urls if url))
        return sorted(unique, key=self.priority)[:self.config.max_pages]

    def is_valid_url(self, url, host) -> bool:
        return is_same_host(url, host) and not is_blacklisted(url, self.config.blacklist)

    def wait_for_rate_limit(self, run: _CrawlRun):
        """Keep batch starts at least request_delay apart."""
        if self.config.request_delay <= 0:
            return
        elapsed = time.monotonic() - run.last_batch_start
        if elapsed < self.config.request_delay:
            time.sleep(self.config.request_delay - elapsed)
        run.last_batch_start = time.monotonic()

    # Fetch steps

    def crawl_homepage(self, base_url):
        fetched = self.fetcher.fetch_page(base_url)
        if fetched is None:
            raise HomepageUnreachableError(base_url)

        # Follow a redirect to another host (example.com -> www.example.com)
        home_url = normalize_url(fetched.final_url) or base_url
        host = host_of(home_url)
        soup = make_soup(fetched.body)
        navigation = extract_navigation(soup, home_url, self.config.nav_max_depth)
        brand_info = brand_identity.resolve(extract_brand_signals(soup, home_url))
        parsed = parse_soup(soup, home_url, host, self.config.body_text_limit, self.config.blacklist)

        page = CrawledPage(
            url=home_url,
            title=parsed.title,
            page_type=PageType.HOMEPAGE,
            body_text=parsed.body_text,
            headings=parsed.headings,
            outbound_links=parsed.links,
            meta_description=parsed.meta_description,
        )
        return page, navigation, brand_info

    def fetch_sitemap_urls(self, origin, host) -> List[str]:
        for path in self.config.sitemap_paths:
            xml = self.fetcher.fetch_sitemap(origin + path)
            if not xml:
                continue
            urls = parse_sitemap(xml, host)
            if urls:
                logger.info(f"Found sitemap {origin + path} with {len(urls)} URLs")
                return urls
        return []

    def crawl_page(self, url, host) -> Optional[CrawledPage]:
        fetched = self.fetcher.fetch_page(url)
        if fetched is None:
            return None
        if fetched.final_url and host_of(fetched.final_url) != host:
            logger.info(f"Skipping {url}: redirected off-site to {fetched.final_url}")
            return None

        parsed = parse_soup(make_soup(fetched.body), url, host, self.config.body_text_limit, self.config.blacklist)
        return CrawledPage(
            url=url,
            title=parsed.title,
            page_type=self.classifier.classify(url, parsed.title, parsed.headings),
            body_text=parsed.body_text,
            headings=parsed.headings,
            outbound_links=parsed.links,
            meta_description=parsed.meta_description,
        )

    # Navigation scanning

    def navigation_urls(self, navigation: Sequence[NavigationItem]) -> List[str]:
        return [item.href for item, _ in iter_navigation(navigation) if item.href]

    def detect_blog(self, navigation: Sequence[NavigationItem], candidate_urls: Sequence[str]) -> BlogInfo:
        blog_info = BlogInfo()
        for item, _ in iter_navigation(navigation):
            label = item.label.lower()
            if item.href and any(keyword in label for keyword in self.config.blog_nav_keywords):
                blog_info.blog_url = item.href
                break

        if not blog_info.blog_url:
            for url in candidate_urls:
                path = urlparse(url).path.lower()
                if any(path.startswith(prefix) for prefix in self.config.blog_paths):
                    blog_info.blog_url = url
                    break

        blog_info.has_blog = bool(blog_info.blog_url)
        return blog_info

    def detect_services(self, navigation: Sequence[NavigationItem], candidate_urls: Sequence[str]) -> ServicesInfo:
        services_info = ServicesInfo()
        for item, _ in iter_navigation(navigation):
            label = item.label.lower()
            if not any(keyword in label for keyword in self.config.service_nav_keywords):
                continue
            _append_unique(services_info.service_urls, item.href)
            is_practice = 'practice' in label or 'area' in label
            for child in item.children:
                name = child.label.strip()
                if len(name) <= 2:
                    continue
                _append_unique(services_info.practice_areas if is_practice else services_info.services, name)
                _append_unique(services_info.service_urls, child.href)

        if not services_info.services and not services_info.practice_areas:
            for url in candidate_urls:
                path = urlparse(url).path.lower()
                if any(path.startswith(prefix) for prefix in self.config.service_paths):
                    _append_unique(services_info.service_urls, url)
        return services_info

    # Post-crawl passes

    def resolve_from_about_pages(self, brand_info: ExtractedBrandInfo, pages: Sequence[CrawledPage]):
        if brand_info.confidence == Confidence.HIGH:
            return
        for page in pages:
            if page.page_type != PageType.ABOUT:
                continue
            name = brand_identity.extract_about_page_name(page.body_text, page.headings)
            if name:
                brand_info.about_page_name = name
                brand_info.recommended_name, _ = brand_identity.select_best_name(brand_info)
                brand_info.confidence = Confidence.HIGH
                logger.info(f"Brand name {name!r} found on {page.url}")
                return

    def extract_blog_topics(self, pages: Sequence[CrawledPage]) -> List[str]:
        topics = []
        for page in pages:
            for heading in page.headings[:3]:
                if 5 < len(heading) < 100:
                    _append_unique(topics, heading)
        return topics[:self.config.max_blog_topics]

    @staticmethod
    def extract_service_names(page: CrawledPage) -> List[str]:
        names = []
        if page.title:
            clean_title = brand_identity.TITLE_SEPARATORS.split(page.title)[0].strip()
            if 3 < len(clean_title) < 60:
                names.append(clean_title)
        if page.headings:
            heading = page.headings[0]
            if 3 < len(heading) < 60:
                _append_unique(names, heading)
        return names

    def collect_services(self, services_info: ServicesInfo, pages: Sequence[CrawledPage]):
        for page in pages:
            if page.page_type not in SERVICE_PAGE_TYPES:
                continue
            for name in self.extract_service_names(page):
                if name in services_info.services or name in services_info.practice_areas:
                    continue
                if page.page_type == PageType.PRACTICE_AREA:
                    services_info.practice_areas.append(name)
                else:
                    services_info.services.append(name)

    # Main loop

    def _drain(self, run: _CrawlRun):
        max_pages = self.config.max_pages
        with ThreadPoolExecutor(max_workers=max(1, self.config.concurrency)) as executor:
            while run.frontier and len(run.pages) < max_pages:
                self.wait_for_rate_limit(run)
                batch = run.frontier.next_batch(min(self.config.concurrency, max_pages - len(run.pages)))
                futures = {executor.submit(self.crawl_page, url, run.host): url for url in batch}

                for future in as_completed(futures):
                    url = futures[future]
                    try:
                        page = future.result()
                    except Exception as e:
                        logger.error(f"Failed to crawl {url}: {e}")
                        continue
                    if page is None:
                        continue

                    run.pages.append(page)
                    if not run.sitemap_found:
                        new_links = [link for link in page.outbound_links if link not in run.frontier]
                        run.frontier.extend(self.prioritize(new_links))
                    if page.page_type in BLOG_PAGE_TYPES:
                        _append_unique(run.blog_info.blog_posts, page.title)

                logger.debug(f"Batch done: {len(run.pages)} pages, {len(run.frontier)} queued")

    def crawl(self, base_url) -> CrawlResult:
        start = time.monotonic()
        base_url = normalize_url(base_url) or base_url

        homepage, navigation, brand_info = self.crawl_homepage(base_url)
        host = host_of(homepage.url)
        parsed = urlparse(homepage.url)
        origin = f"{parsed.scheme}://{parsed.netloc}"

        run = _CrawlRun(
            host=host,
            origin=origin,
            frontier=Frontier(accept=lambda url: self.is_valid_url(url, host)),
        )
        run.pages.append(homepage)
        run.frontier.mark_visited(homepage.url)
        run.frontier.mark_visited(base_url)

        sitemap_urls = self.fetch_sitemap_urls(origin, host)
        run.sitemap_found = bool(sitemap_urls)

        seeds = self.navigation_urls(navigation) + (sitemap_urls if run.sitemap_found else list(homepage.outbound_links))
        seeds = [url for url in map(normalize_url, seeds) if url and self.is_valid_url(url, host)]
        run.frontier.extend(self.prioritize(seeds))

        queued = list(run.frontier)
        run.blog_info = self.detect_blog(navigation, queued)
        run.services_info = self.detect_services(navigation, queued)
        run.frontier.push_front([run.blog_info.blog_url] + run.services_info.service_urls)

        logger.info(
            f"Crawling {base_url}: {len(run.frontier)} URLs queued, "
            f"sitemap {'found' if run.sitemap_found else 'not found'}"
        )
        self._drain(run)

        self.resolve_from_about_pages(brand_info, run.pages)

        blog_pages = [page for page in run.pages if page.page_type in BLOG_PAGE_TYPES]
        run.blog_info.blog_topics = self.extract_blog_topics(blog_pages)
        run.blog_info.has_blog = bool(blog_pages) or bool(run.blog_info.blog_url)
        self.collect_services(run.services_info, run.pages)

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(f"Crawled {len(run.pages)} pages from {host} in {duration_ms}ms")
        return CrawlResult(
            domain=host,
            pages_crawled=len(run.pages),
            pages=tuple(run.pages),
            sitemap_found=run.sitemap_found,
            crawl_duration_ms=duration_ms,
            aggregated_content=aggregate_content(run.pages, navigation),
            navigation=tuple(navigation),
            brand_info=brand_info,
            blog_info=run.blog_info,
            services_info=run.services_info,
        )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Crawl a website and report its brand signals")
    parser.add_argument('url', help="Site URL, e.g. https://example.com")
    parser.add_argument('--max-pages', type=int, default=settings.crawl.max_pages)
    parser.add_argument('--json', action='store_true', help="Print the full crawl result as JSON")
    args = parser.parse_args(argv)

    configure_logging()
    crawler = SiteCrawler(replace(settings.crawl, max_pages=args.max_pages))
    try:
        result = crawler.crawl(args.url)
    finally:
        crawler.fetcher.close()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    print(f"Domain: {result.domain}")
    print(f"Pages crawled: {result.pages_crawled} (sitemap {'found' if result.sitemap_found else 'not found'})")
    print(f"Brand name: {result.brand_info.recommended_name} ({result.brand_info.confidence.value} confidence)")
    for page in result.pages:
        print(f"  [{page.page_type.value}] {page.url}")


if __name__ == "__main__":
    main()
