"""
Brand profile generation through the Anthropic Messages API.

The crawl is folded into one prompt; the model answers with a JSON brand
profile which is then rendered as a markdown summary.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import anthropic

from aggregator import navigation_text
from exceptions import ProfileParseError
from schema import CrawlResult
from settings import settings

logger = logging.getLogger(__name__)

PROFILE_FIELDS = """{
  "name": "Brand name",
  "tracked_brand": "Brand name for tracking",
  "website_url": "Website URL",
  "industry": "Primary industry/category",
  "sub_industry": "More specific sub-category if applicable",
  "description": "3-4 sentence description of what the company does",
  "target_audience": "Detailed description of primary target audience",
  "secondary_audiences": ["Array of secondary audience segments"],
  "brand_voice": "One of: professional, casual, technical, friendly, authoritative",
  "tone_guidelines": "Specific guidelines for brand communication style",
  "key_differentiators": ["Array of unique differentiators"],
  "key_messages": ["Array of core brand messages"],
  "important_keywords": ["Array of important keywords"],
  "content_pillars": ["Array of main content themes"],
  "unique_selling_points": ["Array of USPs"],
  "products_services": ["Array of products or services"],
  "pricing_model": "Description of pricing model if found",
  "avoid_topics": ["Array of topics to avoid"],
  "competitors": ["Array of likely competitors"],
  "brand_personality_traits": ["Array of personality traits"],
  "customer_pain_points": ["Array of customer problems solved"],
  "proof_points": ["Array of case studies, testimonials, or statistics"]
}"""


def _or(value, fallback):
    return value if value else fallback


def build_profile_prompt(brand_name, website_url, crawl_result: CrawlResult) -> str:
    content = crawl_result.aggregated_content
    brand = crawl_result.brand_info
    blog = crawl_result.blog_info
    services = crawl_result.services_info

    navigation = navigation_text(crawl_result.navigation) or 'No navigation structure extracted'
    service_lines = []
    if services.services:
        service_lines.append(f"Services: {', '.join(services.services)}")
    if services.practice_areas:
        service_lines.append(f"Practice Areas: {', '.join(services.practice_areas)}")
    service_text = '\n'.join(service_lines)
    headings_text = '\n'.join(content.all_headings[:50])

    return f"""You are a brand strategist analyzing a company's website to create a comprehensive Brand Bible.

CONFIRMED BRAND NAME: {brand_name}
WEBSITE: {website_url}
PAGES CRAWLED: {crawl_result.pages_crawled}

BRAND NAME VERIFICATION:
- Recommended Name: {brand.recommended_name} (Confidence: {brand.confidence.value})
- From Logo: {_or(brand.logo_text, 'Not found')}
- From Title: {_or(brand.title_brand_name, 'Not found')}
- From Schema.org: {_or(brand.schema_org_name, 'Not found')}
- From Open Graph: {_or(brand.og_site_name, 'Not found')}
- From Footer: {_or(brand.footer_company_name, 'Not found')}
- Domain-based: {brand.domain_based_name}

=== WEBSITE NAVIGATION STRUCTURE ===
{navigation}

SERVICES/PRACTICE AREAS FROM NAVIGATION:
{_or(service_text, 'None detected')}

BLOG/CONTENT DETECTION:
- Has Blog: {'YES' if blog.has_blog else 'NO'}
- Blog URL: {_or(blog.blog_url, 'Not found')}
- Blog Posts Found: {len(blog.blog_posts)}
- Blog Topics: {_or(', '.join(blog.blog_topics), 'None detected')}

=== COMPANY INFORMATION (Homepage & About) ===
{_or(content.company_info, 'No company information available')}

=== PRODUCTS & SERVICES ===
{_or(content.products_and_services, 'No products/services information available')}

=== VALUE PROPOSITIONS ===
{_or(content.value_propositions, 'No value propositions found')}

=== TARGET AUDIENCE SIGNALS ===
{_or(content.target_audience, 'No target audience signals found')}

=== PRICING INFORMATION ===
{_or(content.pricing_info, 'No pricing page found')}

=== BLOG/CONTENT TOPICS ===
{_or(content.blog_topics, 'No blog content found')}

=== TEAM INFORMATION ===
{_or(content.team_info, 'No team information found')}

=== ALL PAGE HEADINGS ===
{_or(headings_text, 'No headings extracted')}

---

Based on this website analysis, generate a detailed Brand Bible. Be specific and use actual information from the content. Do not make up information - if something is unclear, make reasonable inferences based on the available data.

Return ONLY a JSON object with these exact fields:
{PROFILE_FIELDS}

Return ONLY the JSON object, no markdown formatting."""


def parse_profile(text) -> Dict[str, Any]:
    """Parse the model's JSON answer, tolerating markdown code fences."""
    cleaned = (text or '').strip()
    if '```json' in cleaned:
        cleaned = cleaned.split('```json', 1)[1].split('```', 1)[0]
    elif cleaned.startswith('```'):
        cleaned = cleaned.split('```', 2)[1]
    try:
        profile = json.loads(cleaned.strip())
    except ValueError as e:
        raise ProfileParseError(f"Failed to parse brand profile from model output: {e}") from e
    if not isinstance(profile, dict):
        raise ProfileParseError("Brand profile must be a JSON object")
    return profile


def _bullets(title, items) -> List[str]:
    if not items:
        return []
    return [f"## {title}"] + [f"- {item}" for item in items] + ['']


def render_markdown(profile: Dict[str, Any]) -> str:
    brand = profile.get('tracked_brand') or profile.get('name') or 'Brand'
    sections = [f"# {brand} Brand Overview", '']

    if profile.get('description'):
        sections += ['## About', profile['description'], '']
    if profile.get('industry'):
        sub_industry = f" / {profile['sub_industry']}" if profile.get('sub_industry') else ''
        sections += [f"**Industry:** {profile['industry']}{sub_industry}", '']
    if profile.get('target_audience'):
        sections += ['## Target Audience', profile['target_audience'], '']

    sections += _bullets('Unique Selling Points', profile.get('unique_selling_points'))
    sections += _bullets('Key Differentiators', profile.get('key_differentiators'))
    sections += _bullets('Products & Services', profile.get('products_services'))

    if profile.get('brand_voice'):
        sections += ['## Brand Voice', f"**Voice:** {profile['brand_voice']}"]
        if profile.get('tone_guidelines'):
            sections.append(f"\n{profile['tone_guidelines']}")
        sections.append('')
    if profile.get('important_keywords'):
        sections += ['## Important Keywords', ', '.join(profile['important_keywords']), '']

    sections += _bullets('Competitors', profile.get('competitors'))
    return '\n'.join(sections)


class AnthropicSummarizer:
    """Single blocking model call per profile; no retries."""

    def __init__(self, model: Optional[str] = None, max_tokens: Optional[int] = None, client=None):
        self.model = model or settings.anthropic_model
        self.max_tokens = max_tokens or settings.anthropic_max_tokens
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = anthropic.Anthropic()
        return self._client

    def summarize(self, prompt) -> str:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return ''.join(block.text for block in response.content if getattr(block, 'type', None) == 'text')

    def structure_profile(self, brand_name, website_url, crawl_result: CrawlResult) -> Dict[str, Any]:
        prompt = build_profile_prompt(brand_name, website_url, crawl_result)
        logger.info(f"Requesting brand profile for {brand_name!r} ({len(prompt)} prompt chars)")
        profile = parse_profile(self.summarize(prompt))
        profile.update({'name': brand_name, 'tracked_brand': brand_name, 'website_url': website_url})
        return profile

    def render_markdown(self, profile: Dict[str, Any]) -> str:
        return render_markdown(profile)
