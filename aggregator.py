"""
Fold classified pages into fixed-size text buckets for the summarizer.

Bucket membership depends only on page type; each bucket is capped so the
prompt handed to the summarizer stays bounded.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from page_parser import iter_navigation
from schema import AggregatedContent, CrawledPage, NavigationItem, PageType

# bucket -> (page types, character cap)
BUCKETS: Dict[str, Tuple[Tuple[PageType, ...], int]] = {
    'company_info': ((PageType.HOMEPAGE, PageType.ABOUT), 4000),
    'products_and_services': (
        (PageType.PRODUCT, PageType.SERVICE, PageType.PRACTICE_AREA, PageType.FEATURES), 6000),
    'value_propositions': ((PageType.HOMEPAGE, PageType.FEATURES, PageType.PRODUCT), 3000),
    'target_audience': ((PageType.HOMEPAGE, PageType.ABOUT, PageType.CASE_STUDY), 3000),
    'blog_topics': ((PageType.BLOG, PageType.BLOG_POST), 4000),
    'pricing_info': ((PageType.PRICING,), 2000),
    'team_info': ((PageType.ABOUT, PageType.CAREERS), 2000),
}
MAX_HEADINGS = 100
PAGE_EXCERPT = 500


def navigation_text(navigation: Sequence[NavigationItem]) -> str:
    return '\n'.join(f"{'  ' * depth}- {item.label}" for item, depth in iter_navigation(navigation))


def _bucket_text(pages_by_type, page_types: Iterable[PageType], limit) -> str:
    pages = [page for page_type in page_types for page in pages_by_type[page_type]]
    return '\n\n'.join(f"[{page.title}]\n{page.body_text}" for page in pages)[:limit]


def aggregate_content(pages: Sequence[CrawledPage], navigation: Sequence[NavigationItem] = (),
                      buckets=BUCKETS) -> AggregatedContent:
    pages_by_type: Dict[PageType, List[CrawledPage]] = defaultdict(list)
    for page in pages:
        pages_by_type[page.page_type].append(page)

    texts = {
        name: _bucket_text(pages_by_type, page_types, limit)
        for name, (page_types, limit) in buckets.items()
    }
    all_headings = [heading for page in pages for heading in page.headings][:MAX_HEADINGS]
    all_content = '\n\n'.join(
        f"### {page.title} ({page.page_type.value})\n{page.body_text[:PAGE_EXCERPT]}" for page in pages
    )
    return AggregatedContent(
        all_headings=tuple(all_headings),
        all_content=all_content,
        navigation_text=navigation_text(navigation),
        **texts,
    )
