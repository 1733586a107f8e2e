"""
Configuration for the crawler and the generation pipeline.

Crawl tuning lives in immutable dataclasses that are handed to the crawler and
classifier at construction; deployment settings come from the environment
(optionally a .env file).
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv


USER_AGENT = "BrandProfiler/1.0 (+https://github.com/brand-profiler)"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Lower rank is crawled first; unmatched paths get UNMATCHED_PRIORITY
PAGE_PRIORITY = (
    ('/', 1),
    ('/about', 2),
    ('/about-us', 2),
    ('/our-firm', 2),
    ('/our-team', 2),
    ('/products', 3),
    ('/services', 3),
    ('/practice-areas', 3),
    ('/areas-of-practice', 3),
    ('/what-we-do', 3),
    ('/features', 4),
    ('/pricing', 5),
    ('/solutions', 6),
    ('/platform', 6),
    ('/how-it-works', 7),
    ('/why', 7),
    ('/customers', 8),
    ('/case-studies', 8),
    ('/results', 8),
    ('/testimonials', 8),
    ('/blog', 9),
    ('/news', 9),
    ('/articles', 9),
    ('/insights', 9),
    ('/resources', 9),
    ('/team', 10),
    ('/attorneys', 10),
    ('/lawyers', 10),
    ('/careers', 11),
    ('/faq', 12),
    ('/contact', 13),
)
UNMATCHED_PRIORITY = 100

BLOG_PATHS = (
    '/blog', '/news', '/articles', '/insights', '/resources',
    '/posts', '/journal', '/updates', '/press', '/media',
)
BLOG_NAV_KEYWORDS = (
    'blog', 'news', 'articles', 'insights', 'resources',
    'journal', 'updates', 'press', 'media', 'publications',
)

SERVICE_PATHS = (
    '/services', '/practice-areas', '/areas-of-practice', '/what-we-do',
    '/expertise', '/specialties', '/capabilities', '/solutions',
)
SERVICE_NAV_KEYWORDS = (
    'services', 'practice areas', 'areas of practice', 'what we do',
    'expertise', 'specialties', 'capabilities', 'solutions', 'our work',
)

SITEMAP_PATHS = ('/sitemap.xml', '/sitemap_index.xml', '/sitemap/sitemap.xml')

BLACKLIST = (
    '.jpg', '.jpeg', '.png', '.gif', '.svg', '.webp', '.ico',
    '.css', '.js', '.pdf', '.zip', '.gz', '.mp4', '.mp3', '.xml',
)


@dataclass(frozen=True)
class ClassifierRules:
    """Keyword tables for the page classifier, checked in order."""

    # (path substrings, page type) - first hit wins
    early_path_rules: Tuple[Tuple[Tuple[str, ...], str], ...] = (
        (('/about', '/company', '/our-firm'), 'about'),
        (('/practice-area', '/areas-of-practice'), 'practice_area'),
    )
    path_rules: Tuple[Tuple[Tuple[str, ...], str], ...] = (
        (('/product', '/platform'), 'product'),
        (('/service',), 'service'),
        (('/pricing', '/plans'), 'pricing'),
        (('/feature',), 'features'),
    )
    practice_topics: str = (
        r'/(employment|personal-injury|medical-malpractice|car-accident|truck-accident'
        r'|wrongful-death|sexual-harassment|discrimination|child-abuse|sex-abuse)'
    )
    blog_markers: Tuple[str, ...] = ('/blog', '/news', '/article', '/insights')
    blog_index: str = r'^/(blog|news|articles|insights)/?$'
    late_path_rules: Tuple[Tuple[Tuple[str, ...], str], ...] = (
        (('/case-stud', '/customer-stor'), 'case_study'),
        (('/doc', '/guide', '/help'), 'documentation'),
        (('/faq',), 'faq'),
        (('/contact',), 'contact'),
        (('/career', '/job'), 'careers'),
        (('/privacy', '/terms', '/legal'), 'legal'),
    )
    content_rules: Tuple[Tuple[Tuple[str, ...], str], ...] = (
        (('practice area', 'area of practice'), 'practice_area'),
        (('attorney', 'lawyer', 'legal service'), 'service'),
        (('pricing', 'plans', 'subscription'), 'pricing'),
        (('about us', 'our story', 'who we are'), 'about'),
        (('feature', 'capability'), 'features'),
        (('case study', 'success story'), 'case_study'),
        (('documentation', 'api reference'), 'documentation'),
        (('faq', 'frequently asked'), 'faq'),
    )


@dataclass(frozen=True)
class CrawlConfig:
    """Tuning knobs for a single crawl run."""

    max_pages: int = 200
    concurrency: int = 5
    request_delay: float = 0.3  # seconds between batch starts
    request_timeout: float = 15.0
    max_retries: int = 2
    retry_backoff: float = 0.5
    user_agent: str = USER_AGENT
    body_text_limit: int = 10000
    nav_max_depth: int = 3
    max_blog_topics: int = 20

    sitemap_paths: Tuple[str, ...] = SITEMAP_PATHS
    page_priority: Tuple[Tuple[str, int], ...] = PAGE_PRIORITY
    blog_paths: Tuple[str, ...] = BLOG_PATHS
    blog_nav_keywords: Tuple[str, ...] = BLOG_NAV_KEYWORDS
    service_paths: Tuple[str, ...] = SERVICE_PATHS
    service_nav_keywords: Tuple[str, ...] = SERVICE_NAV_KEYWORDS
    blacklist: Tuple[str, ...] = BLACKLIST
    classifier_rules: ClassifierRules = field(default_factory=ClassifierRules)


@dataclass(frozen=True)
class Settings:
    """Deployment settings read from the environment."""

    database_url: str = 'sqlite:///brand_overviews.db'
    anthropic_model: str = 'claude-sonnet-4-20250514'
    anthropic_max_tokens: int = 3000
    log_level: str = 'INFO'
    crawl: CrawlConfig = field(default_factory=CrawlConfig)


def _load_environment():
    """Load .env, letting .env.local override it."""
    env_path = Path('.env')
    if env_path.exists():
        load_dotenv(env_path)
    local_env = Path('.env.local')
    if local_env.exists():
        load_dotenv(local_env, override=True)


def load_settings() -> Settings:
    _load_environment()
    defaults = CrawlConfig()
    crawl = CrawlConfig(
        max_pages=int(os.getenv('CRAWL_MAX_PAGES', defaults.max_pages)),
        concurrency=int(os.getenv('CRAWL_CONCURRENCY', defaults.concurrency)),
        request_delay=float(os.getenv('CRAWL_REQUEST_DELAY_MS', defaults.request_delay * 1000)) / 1000.0,
        request_timeout=float(os.getenv('CRAWL_REQUEST_TIMEOUT', defaults.request_timeout)),
    )
    return Settings(
        database_url=os.getenv('DATABASE_URL', Settings.database_url),
        anthropic_model=os.getenv('ANTHROPIC_MODEL', Settings.anthropic_model),
        anthropic_max_tokens=int(os.getenv('ANTHROPIC_MAX_TOKENS', Settings.anthropic_max_tokens)),
        log_level=os.getenv('LOG_LEVEL', Settings.log_level).upper(),
        crawl=crawl,
    )


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(level=level or settings.log_level, format=LOG_FORMAT)


settings = load_settings()
