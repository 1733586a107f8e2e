"""
Structural HTML parsing: page content, same-host links, the navigation tree,
brand-name signals and sitemap entries.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

import brand_identity
from schema import ExtractedBrandInfo, NavigationItem

logger = logging.getLogger(__name__)

CHROME_SELECTOR = (
    'script, style, nav, footer, header, aside, iframe, noscript, '
    '[role="navigation"], [role="banner"], [role="contentinfo"]'
)

NAV_SELECTORS = (
    'nav[role="navigation"]',
    'header nav',
    'nav.main-nav',
    'nav.primary-nav',
    'nav#main-nav',
    '.main-navigation',
    '#navigation',
    'nav',
)
TOP_LEVEL_NAV = ':scope > ul > li, :scope > div > ul > li, :scope > div > a, :scope > a'
SUBMENU_SELECTOR = 'ul, .dropdown-menu, .sub-menu'

LOGO_SELECTORS = (
    'header .logo img',
    'header img.logo',
    '.site-logo img',
    '#logo img',
    'a.logo img',
    '.navbar-brand img',
    'header a img',
)

ORGANIZATION_TYPES = {'Organization', 'LocalBusiness', 'LegalService'}

COPYRIGHT_PATTERNS = (
    re.compile(r'©\s*\d{4}(?:\s*[-–]\s*\d{4})?\s+([^.|\n]+)', re.I),
    re.compile(r'copyright\s*(?:©\s*)?\d{4}(?:\s*[-–]\s*\d{4})?\s+([^.|\n]+)', re.I),
)


@dataclass(frozen=True)
class ParsedPage:
    title: str
    meta_description: Optional[str]
    headings: Tuple[str, ...]
    body_text: str
    links: Tuple[str, ...]


def make_soup(html) -> BeautifulSoup:
    return BeautifulSoup(html, 'html.parser')


def normalize_url(url) -> Optional[str]:
    """scheme://host/path with query, fragment and trailing slash removed; None for non-http URLs."""
    try:
        parsed = urlparse(url.strip())
    except (AttributeError, ValueError):
        return None
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return None
    path = parsed.path or '/'
    if len(path) > 1:
        path = path.rstrip('/') or '/'
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}{path}"


def absolute_url(base_url, href) -> Optional[str]:
    """urljoin that yields None for malformed hrefs such as 'http://[broken'."""
    try:
        return urljoin(base_url, href.strip())
    except ValueError:
        return None


def host_of(url) -> str:
    return (urlparse(url).hostname or '').lower()


def is_same_host(url, host) -> bool:
    return host_of(url) == host


def is_blacklisted(url, blacklist: Sequence[str]) -> bool:
    path = urlparse(url).path.lower()
    return any(path.endswith(ext) for ext in blacklist)


def extract_title(soup) -> str:
    title_tag = soup.find('title')
    return title_tag.get_text(strip=True) if title_tag else ''


def extract_meta_description(soup) -> Optional[str]:
    meta = soup.find('meta', attrs={'name': 'description'})
    if meta and meta.get('content'):
        return meta['content'].strip()
    return None


def extract_headings(soup) -> List[str]:
    headings = []
    for el in soup.find_all(['h1', 'h2', 'h3']):
        text = ' '.join(el.get_text(' ').split())
        if text:
            headings.append(text)
    return headings


def extract_links(soup, page_url, host, blacklist: Sequence[str] = ()) -> List[str]:
    links = []
    seen = set()
    for anchor in soup.find_all('a', href=True):
        joined = absolute_url(page_url, anchor['href'])
        url = normalize_url(joined) if joined else None
        if not url or url in seen:
            continue
        if not is_same_host(url, host) or is_blacklisted(url, blacklist):
            continue
        seen.add(url)
        links.append(url)
    return links


def extract_body_text(soup, limit) -> str:
    """Visible text with page chrome removed. Mutates the soup."""
    for tag in soup.select(CHROME_SELECTOR):
        tag.extract()
    body = soup.body or soup
    return ' '.join(body.get_text(' ').split())[:limit]


def parse_page(html, page_url, host, body_text_limit=10000, blacklist: Sequence[str] = ()) -> ParsedPage:
    return parse_soup(make_soup(html), page_url, host, body_text_limit, blacklist)


def parse_soup(soup, page_url, host, body_text_limit=10000, blacklist: Sequence[str] = ()) -> ParsedPage:
    # Links and headings are read before the chrome is stripped for the body text
    title = extract_title(soup)
    meta_description = extract_meta_description(soup)
    headings = extract_headings(soup)
    links = extract_links(soup, page_url, host, blacklist)
    body_text = extract_body_text(soup, body_text_limit)
    return ParsedPage(
        title=title,
        meta_description=meta_description,
        headings=tuple(headings),
        body_text=body_text,
        links=tuple(links),
    )


# Navigation

def _find_nav(soup):
    for selector in NAV_SELECTORS:
        found = soup.select_one(selector)
        if found is not None:
            return found
    return None


def _first_line(text) -> str:
    for line in text.split('\n'):
        if line.strip():
            return line.strip()
    return ''


def _nav_item(el, base_url, require_href=False) -> Optional[NavigationItem]:
    link = el if el.name == 'a' else el.find('a')
    if link is None:
        return None
    label = _first_line(link.get_text('\n'))
    href = link.get('href')
    href = absolute_url(base_url, href) if href else None
    if not label or (require_href and not href):
        return None
    return NavigationItem(label=label, href=href or '')


def _has_menu_ancestor(menu, stop, menu_ids) -> bool:
    for parent in menu.parents:
        if parent is stop:
            return False
        if id(parent) in menu_ids:
            return True
    return False


def _submenu_entries(el):
    if el.name == 'a':
        return []
    menus = el.select(SUBMENU_SELECTOR)
    menu_ids = {id(menu) for menu in menus}
    entries = []
    for menu in menus:
        if _has_menu_ancestor(menu, el, menu_ids):
            continue
        entries.extend(menu.select(':scope > li, :scope > a'))
    return entries


def extract_navigation(soup, base_url, max_depth=3) -> List[NavigationItem]:
    """Build the navigation tree from the main nav element, depth-capped."""
    nav = _find_nav(soup)
    if nav is None:
        return []

    roots: List[NavigationItem] = []
    stack = [(el, roots, 0) for el in reversed(nav.select(TOP_LEVEL_NAV))]
    while stack:
        el, siblings, depth = stack.pop()
        item = _nav_item(el, base_url, require_href=depth > 0)
        if item is None:
            continue
        siblings.append(item)
        if depth + 1 >= max_depth:
            continue
        for child in reversed(_submenu_entries(el)):
            stack.append((child, item.children, depth + 1))

    if roots:
        return roots

    # Flat fallback: every labelled link in the nav
    for anchor in nav.find_all('a', href=True):
        label = anchor.get_text(strip=True)
        href = absolute_url(base_url, anchor['href'])
        if label and href:
            roots.append(NavigationItem(label=label, href=href))
    return roots


def iter_navigation(navigation: Sequence[NavigationItem], max_depth=8):
    """Pre-order walk yielding (item, depth) without recursion."""
    stack = [(item, 0) for item in reversed(navigation)]
    while stack:
        item, depth = stack.pop()
        yield item, depth
        if depth + 1 < max_depth:
            stack.extend((child, depth + 1) for child in reversed(item.children))


# Brand signals

def _logo_text(soup) -> Optional[str]:
    for selector in LOGO_SELECTORS:
        img = soup.select_one(selector)
        if img is None:
            continue
        alt = (img.get('alt') or '').strip()
        if brand_identity.is_usable_logo_text(alt):
            return alt
    link = soup.select_one('header a[aria-label]')
    if link is not None:
        label = link['aria-label'].strip()
        if brand_identity.is_usable_logo_text(label):
            return label
    return None


def _json_ld_nodes(data):
    stack = [data]
    while stack:
        node = stack.pop()
        if isinstance(node, list):
            stack.extend(reversed(node))
        elif isinstance(node, dict):
            yield node
            if isinstance(node.get('@graph'), list):
                stack.extend(reversed(node['@graph']))


def _is_organization(node) -> bool:
    node_type = node.get('@type')
    types = node_type if isinstance(node_type, list) else [node_type]
    return any(t in ORGANIZATION_TYPES for t in types)


def _schema_org_name(soup) -> Optional[str]:
    for script in soup.find_all('script', attrs={'type': 'application/ld+json'}):
        try:
            data = json.loads(script.string or script.get_text())
        except ValueError:
            continue
        for node in _json_ld_nodes(data):
            if _is_organization(node) and isinstance(node.get('name'), str) and node['name'].strip():
                return node['name'].strip()
            publisher = node.get('publisher')
            if (isinstance(publisher, dict) and _is_organization(publisher)
                    and isinstance(publisher.get('name'), str) and publisher['name'].strip()):
                return publisher['name'].strip()
    return None


def _footer_company_name(soup) -> Optional[str]:
    footer = soup.find('footer')
    if footer is None:
        return None
    text = footer.get_text('\n')
    for pattern in COPYRIGHT_PATTERNS:
        match = pattern.search(text)
        if match:
            name = brand_identity.strip_legal_suffix(match.group(1))
            return name or None
    return None


def extract_brand_signals(soup, base_url) -> ExtractedBrandInfo:
    """Collect raw brand-name signals from the homepage. Recommendation is left to the resolver."""
    og = soup.find('meta', attrs={'property': 'og:site_name'})
    og_site_name = (og.get('content') or '').strip() if og else ''
    return ExtractedBrandInfo(
        domain_based_name=brand_identity.domain_based_name(host_of(base_url)),
        logo_text=_logo_text(soup),
        title_brand_name=brand_identity.title_brand_fragment(extract_title(soup)),
        og_site_name=og_site_name or None,
        schema_org_name=_schema_org_name(soup),
        footer_company_name=_footer_company_name(soup),
    )


# Sitemaps

def parse_sitemap(xml, host) -> List[str]:
    """Same-host page URLs from <loc> entries; nested sitemap files are skipped."""
    urls = []
    seen = set()
    for loc in make_soup(xml).find_all('loc'):
        raw = loc.get_text(strip=True)
        if not raw or raw.lower().endswith('.xml'):
            continue
        url = normalize_url(raw)
        if url and is_same_host(url, host) and url not in seen:
            seen.add(url)
            urls.append(url)
    return urls
