"""
Data structures produced by a crawl run.

Pages and the result are frozen once built; blog and services info are
accumulated while the crawl runs and handed over with the result.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse


class PageType(str, Enum):
    HOMEPAGE = "homepage"
    ABOUT = "about"
    PRODUCT = "product"
    SERVICE = "service"
    PRACTICE_AREA = "practice_area"
    PRICING = "pricing"
    FEATURES = "features"
    BLOG = "blog"
    BLOG_POST = "blog_post"
    CASE_STUDY = "case_study"
    DOCUMENTATION = "documentation"
    FAQ = "faq"
    CONTACT = "contact"
    CAREERS = "careers"
    LEGAL = "legal"
    OTHER = "other"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def utcnow():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CrawledPage:
    """A single fetched and classified page."""
    url: str
    title: str
    page_type: PageType
    body_text: str
    headings: Tuple[str, ...] = ()
    outbound_links: Tuple[str, ...] = ()
    meta_description: Optional[str] = None
    fetched_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "page_type": self.page_type.value,
            "body_text": self.body_text,
            "headings": list(self.headings),
            "outbound_links": list(self.outbound_links),
            "meta_description": self.meta_description,
            "fetched_at": self.fetched_at.isoformat(),
        }


@dataclass
class NavigationItem:
    label: str
    href: str
    children: List["NavigationItem"] = field(default_factory=list)

    @property
    def is_dropdown(self) -> bool:
        return bool(self.children)

    def to_dict(self) -> Dict[str, Any]:
        # Iterative so deep menus cannot exhaust the recursion limit
        root = {"label": self.label, "href": self.href, "is_dropdown": self.is_dropdown, "children": []}
        stack = [(self, root)]
        while stack:
            item, rendered = stack.pop()
            for child in item.children:
                child_rendered = {
                    "label": child.label,
                    "href": child.href,
                    "is_dropdown": child.is_dropdown,
                    "children": [],
                }
                rendered["children"].append(child_rendered)
                stack.append((child, child_rendered))
        return root


@dataclass
class ExtractedBrandInfo:
    """Every brand-name signal found on the site plus the derived pick."""
    domain_based_name: str
    logo_text: Optional[str] = None
    title_brand_name: Optional[str] = None
    og_site_name: Optional[str] = None
    schema_org_name: Optional[str] = None
    footer_company_name: Optional[str] = None
    about_page_name: Optional[str] = None
    recommended_name: str = ""
    confidence: Confidence = Confidence.LOW

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["confidence"] = self.confidence.value
        return data


@dataclass
class BlogInfo:
    has_blog: bool = False
    blog_url: Optional[str] = None
    blog_posts: List[str] = field(default_factory=list)
    blog_topics: List[str] = field(default_factory=list)


@dataclass
class ServicesInfo:
    services: List[str] = field(default_factory=list)
    practice_areas: List[str] = field(default_factory=list)
    service_urls: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AggregatedContent:
    company_info: str = ""
    products_and_services: str = ""
    value_propositions: str = ""
    target_audience: str = ""
    blog_topics: str = ""
    pricing_info: str = ""
    team_info: str = ""
    all_headings: Tuple[str, ...] = ()
    all_content: str = ""
    navigation_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["all_headings"] = list(self.all_headings)
        return data


@dataclass(frozen=True)
class CrawlResult:
    """The complete output of one crawl run."""
    domain: str
    pages_crawled: int
    pages: Tuple[CrawledPage, ...]
    sitemap_found: bool
    crawl_duration_ms: int
    aggregated_content: AggregatedContent
    navigation: Tuple[NavigationItem, ...]
    brand_info: ExtractedBrandInfo
    blog_info: BlogInfo
    services_info: ServicesInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "pages_crawled": self.pages_crawled,
            "pages": [page.to_dict() for page in self.pages],
            "sitemap_found": self.sitemap_found,
            "crawl_duration_ms": self.crawl_duration_ms,
            "aggregated_content": self.aggregated_content.to_dict(),
            "navigation": [item.to_dict() for item in self.navigation],
            "brand_info": self.brand_info.to_dict(),
            "blog_info": asdict(self.blog_info),
            "services_info": asdict(self.services_info),
        }


def empty_crawl_result(url: str) -> CrawlResult:
    """A well-formed result with no pages, used when the crawl itself fails."""
    domain = urlparse(url).hostname or url
    brand_info = ExtractedBrandInfo(
        domain_based_name=domain,
        recommended_name=domain,
        confidence=Confidence.LOW,
    )
    return CrawlResult(
        domain=domain,
        pages_crawled=0,
        pages=(),
        sitemap_found=False,
        crawl_duration_ms=0,
        aggregated_content=AggregatedContent(),
        navigation=(),
        brand_info=brand_info,
        blog_info=BlogInfo(),
        services_info=ServicesInfo(),
    )
