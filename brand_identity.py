"""
Brand name resolution from weak, possibly conflicting signals.

Signals are ranked by trust: schema.org organization name, og:site_name, logo
alt text, footer copyright holder, <title> fragment, About page. A candidate
that is just the domain spelled differently ("ACMELEGAL.COM" on acmelegal.com)
is not a brand signal and is skipped; the schema.org name is trusted as is.
"""

import re
from typing import List, Optional, Sequence, Tuple

from schema import Confidence, ExtractedBrandInfo

TLD_PATTERN = re.compile(r'\.(?:com|org|net|io|co|law|legal)(?:\.[a-z]{2})?$')
GENERIC_WORDS = ('law', 'legal', 'group', 'firm')
LEGAL_SUFFIX = re.compile(
    r'[,.]?\s*\b(?:all rights reserved|inc|llc|ltd|llp|pllc|p\.?c)\b.*$', re.I
)
TITLE_SEPARATORS = re.compile(r'\s*[|–—:]\s*|\s+-\s+')

_NAME = r"([A-Z][A-Za-z&']*(?:[ ]+(?:&|[A-Z][A-Za-z&']*)){0,5})"
ABOUT_PATTERNS = (
    re.compile(r"(?i:\babout)[ ]+" + _NAME),
    re.compile(_NAME + r"[ ]+(?i:is[ ]+a[ ]+(?:leading|premier|top|trusted|experienced))"),
    re.compile(r"(?i:\bwelcome[ ]+to)[ ]+" + _NAME),
)
ABOUT_NAME_STOPWORDS = {'us', 'our', 'the', 'me'}


def domain_based_name(host) -> str:
    """'www.acme-legal.com' -> 'Acme Legal'"""
    bare = re.sub(r'^www\.', '', (host or '').lower())
    bare = TLD_PATTERN.sub('', bare)
    words = [word for word in re.split(r'[.-]', bare) if word]
    return ' '.join(word[:1].upper() + word[1:] for word in words)


def _letters(text) -> str:
    bare = TLD_PATTERN.sub('', re.sub(r'^www\.', '', text.strip().lower()))
    return re.sub(r'[^a-z]', '', bare)


def _without_generic_words(text, generic_words: Sequence[str] = GENERIC_WORDS) -> str:
    for word in generic_words:
        text = text.replace(word, '')
    return text


def is_domain_based(name, domain_name, generic_words: Sequence[str] = GENERIC_WORDS) -> bool:
    normalized = _letters(name)
    normalized_domain = _letters(domain_name)
    if normalized == normalized_domain:
        return True
    return _without_generic_words(normalized, generic_words) == _without_generic_words(normalized_domain, generic_words)


def is_usable_logo_text(text) -> bool:
    return bool(text) and len(text) > 2 and 'logo' not in text.lower()


def strip_legal_suffix(name) -> str:
    return LEGAL_SUFFIX.sub('', name.strip()).strip(' ,.')


def title_brand_fragment(title) -> Optional[str]:
    """The brand part of '<page> | <brand>' style titles."""
    if not title:
        return None
    parts = [part.strip() for part in TITLE_SEPARATORS.split(title) if part.strip()]
    if len(parts) < 2:
        return None
    first, last = parts[0], parts[-1]
    if 2 < len(last) <= 50 and 'home' not in last.lower():
        return last
    if 2 < len(first) <= 50:
        return first
    return None


def candidate_names(info: ExtractedBrandInfo) -> List[Tuple[str, str]]:
    """(source, name) pairs in trust order, empty signals dropped."""
    logo = info.logo_text if is_usable_logo_text(info.logo_text) else None
    candidates = [
        ('schema_org', info.schema_org_name),
        ('og_site_name', info.og_site_name),
        ('logo', logo),
        ('footer', info.footer_company_name),
        ('title', info.title_brand_name),
        ('about_page', info.about_page_name),
    ]
    return [(source, name.strip()) for source, name in candidates if name and name.strip()]


def determine_confidence(info: ExtractedBrandInfo) -> Confidence:
    if info.schema_org_name:
        return Confidence.HIGH

    logo = info.logo_text if is_usable_logo_text(info.logo_text) else None
    sources = [
        _letters(name)
        for name in (info.og_site_name, logo, info.footer_company_name, info.title_brand_name)
        if name and not is_domain_based(name, info.domain_based_name)
    ]
    sources = [source for source in sources if source]

    for i, name in enumerate(sources):
        for other in sources[i + 1:]:
            if name in other or other in name:
                return Confidence.HIGH
    if sources:
        return Confidence.MEDIUM
    return Confidence.LOW


def select_best_name(info: ExtractedBrandInfo) -> Tuple[str, Confidence]:
    name = info.domain_based_name
    for source, candidate in candidate_names(info):
        if source == 'schema_org' or not is_domain_based(candidate, info.domain_based_name):
            name = candidate
            break
    return name, determine_confidence(info)


def resolve(info: ExtractedBrandInfo) -> ExtractedBrandInfo:
    """Recompute recommended_name and confidence in place."""
    info.recommended_name, info.confidence = select_best_name(info)
    return info


def extract_about_page_name(body_text, headings: Sequence[str] = ()) -> Optional[str]:
    """Look for 'About X', 'X is a leading ...' or 'Welcome to X' on an About page."""
    text = '\n'.join(list(headings) + [body_text or ''])
    for pattern in ABOUT_PATTERNS:
        for match in pattern.finditer(text):
            name = match.group(1).strip(" &'")
            if name.split()[0].lower() in ABOUT_NAME_STOPWORDS:
                continue
            if 3 < len(name) < 60:
                return name
    return None
