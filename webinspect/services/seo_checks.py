"""
SEO signal extractors.

Everything except the technical checks works on the already-fetched page
HTML. The technical checks request ``/sitemap.xml`` and ``/robots.txt`` on the
page origin; a failed request just means the file is reported as absent.
"""
import json
import re
from typing import List
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from ..config import get_settings
from ..exceptions import FetchError, PageFetchError
from ..models import (
    CanonicalTag, ContentAnalysis, ContentSummary, HeadingSummary, ImageSummary,
    LengthCheckedTag, LinkSummary, MetaTagsAnalysis, OpenGraphTags, OptionalTag,
    PageSpeedHint, RobotsTxtStatus, SitemapStatus, SocialMediaAnalysis,
    StructuredDataAnalysis, TechnicalSEOAnalysis, TwitterCardTags, UrlStructure,
)
from ..utils.html import find_all, first_capture, flesch_reading_ease, text_content, words_of
from ..utils.url import origin_of
from .extraction import Extraction
from .fetcher import PageFetcher

TITLE_RANGE = (30, 60)
DESCRIPTION_RANGE = (120, 160)


def _meta_re(attr: str, name: str):
    return re.compile(
        rf"""<meta[^>]+{attr}=["']{re.escape(name)}["'][^>]+content=["']([^"']*?)["']""",
        re.IGNORECASE,
    )


_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE)
_DESCRIPTION_RE = _meta_re("name", "description")
_KEYWORDS_RE = _meta_re("name", "keywords")
_ROBOTS_RE = _meta_re("name", "robots")
_CANONICAL_RE = re.compile(
    r"""<link[^>]+rel=["']canonical["'][^>]+href=["']([^"']*?)["']""", re.IGNORECASE
)

_H1_RE = re.compile(r"<h1[^>]*>.*?</h1>", re.IGNORECASE)
_H2_RE = re.compile(r"<h2[^>]*>.*?</h2>", re.IGNORECASE)
_H3_RE = re.compile(r"<h3[^>]*>.*?</h3>", re.IGNORECASE)
_IMG_RE = re.compile(r"<img[^>]*>", re.IGNORECASE)
_ALT_RE = re.compile(r"""alt=["'][^"']*["']""")
_LINK_RE = re.compile(r"""<a[^>]+href=["']([^"']*?)["'][^>]*>""", re.IGNORECASE)

_OG_TITLE_RE = _meta_re("property", "og:title")
_OG_DESCRIPTION_RE = _meta_re("property", "og:description")
_OG_IMAGE_RE = _meta_re("property", "og:image")
_TWITTER_CARD_RE = _meta_re("name", "twitter:card")
_TWITTER_TITLE_RE = _meta_re("name", "twitter:title")
_TWITTER_DESCRIPTION_RE = _meta_re("name", "twitter:description")

_ITEMTYPE_RE = re.compile(r"""itemtype=["']([^"']*?)["']""", re.IGNORECASE)


async def fetch_page(url: str, fetcher: PageFetcher) -> str:
    """The page every SEO extractor reads; any failure fails the whole audit."""
    try:
        resp = await fetcher.fetch(url, user_agent=get_settings().seo_user_agent)
    except FetchError as e:
        raise PageFetchError(url, str(e)) from e
    if not resp.ok:
        raise PageFetchError(url, f"HTTP {resp.status}")
    return resp.text


# ── Meta tags ──────────────────────────────────────────────────────────────────

def _length_checked(content: str, label: str, bounds, missing: str) -> LengthCheckedTag:
    low, high = bounds
    n = len(content)
    issues = []
    if n == 0:
        issues.append(missing)
    if 0 < n < low:
        issues.append(f"{label} too short (recommended: {low}-{high} characters)")
    if n > high:
        issues.append(f"{label} too long (recommended: {low}-{high} characters)")
    return LengthCheckedTag(content=content, length=n, is_optimal=low <= n <= high, issues=issues)


def analyze_meta_tags(html: str) -> MetaTagsAnalysis:
    title = first_capture(_TITLE_RE, html).strip()
    description = first_capture(_DESCRIPTION_RE, html).strip()
    keywords = first_capture(_KEYWORDS_RE, html).strip()
    robots = first_capture(_ROBOTS_RE, html).strip()
    canonical = first_capture(_CANONICAL_RE, html).strip()

    return MetaTagsAnalysis(
        title=_length_checked(title, "Title", TITLE_RANGE, "Missing title tag"),
        description=_length_checked(
            description, "Description", DESCRIPTION_RANGE, "Missing meta description"
        ),
        keywords=OptionalTag(
            content=keywords,
            is_present=bool(keywords),
            issues=[] if keywords else ["Meta keywords not found (optional but can be helpful)"],
        ),
        robots=OptionalTag(
            content=robots,
            is_present=bool(robots),
            issues=[] if robots else ["Robots meta tag not found"],
        ),
        canonical=CanonicalTag(
            url=canonical,
            is_present=bool(canonical),
            issues=[] if canonical else ["Canonical URL not specified"],
        ),
    )


# ── Content ────────────────────────────────────────────────────────────────────

def _is_internal(link: str, host: str) -> bool:
    if "http://" not in link and "https://" not in link:
        return True
    return bool(host) and host in link


def analyze_content(html: str, url: str) -> ContentAnalysis:
    """Heading, word-count, image and link tallies; links are classified against ``url``'s host."""
    h1 = len(find_all(_H1_RE, html))
    h2 = len(find_all(_H2_RE, html))
    h3 = len(find_all(_H3_RE, html))
    structure = [f"H{level} ({n})" for level, n in ((1, h1), (2, h2), (3, h3)) if n > 0]

    heading_issues = []
    if h1 == 0:
        heading_issues.append("No H1 heading found")
    if h1 > 1:
        heading_issues.append("Multiple H1 headings found (should be unique)")
    if h2 == 0:
        heading_issues.append("No H2 headings found")

    text = text_content(html)
    word_count = len(words_of(text))
    readability = flesch_reading_ease(text)

    content_issues = []
    if word_count < 300:
        content_issues.append("Content too short (recommended: 300+ words)")
    if word_count > 2000:
        content_issues.append("Content very long (consider breaking into sections)")
    if readability < 30:
        content_issues.append("Content may be difficult to read")

    images = find_all(_IMG_RE, html)
    with_alt = len([img for img in images if _ALT_RE.search(img)])
    without_alt = len(images) - with_alt

    host = urlsplit(url).hostname or ""
    links = find_all(_LINK_RE, html)
    internal = len([link for link in links if _is_internal(link, host)])
    external = len(links) - internal

    link_issues = []
    if internal == 0:
        link_issues.append("No internal links found")
    if external > internal * 2:
        link_issues.append("Too many external links compared to internal")

    return ContentAnalysis(
        headings=HeadingSummary(
            h1_count=h1, h2_count=h2, h3_count=h3, structure=structure, issues=heading_issues,
        ),
        content=ContentSummary(
            word_count=word_count,
            readability_score=max(0.0, min(100.0, readability)),
            keyword_density=0,
            issues=content_issues,
        ),
        images=ImageSummary(
            total=len(images),
            with_alt=with_alt,
            without_alt=without_alt,
            issues=[f"{without_alt} images missing alt text"] if without_alt > 0 else [],
        ),
        links=LinkSummary(internal=internal, external=external, broken=0, issues=link_issues),
    )


# ── Technical ──────────────────────────────────────────────────────────────────

def analyze_url_structure(url: str) -> UrlStructure:
    has_parameters = bool(urlsplit(url).query)
    length = len(url)
    is_clean = not has_parameters and "index." not in url and length < 100

    issues = []
    if has_parameters:
        issues.append("URL contains parameters (may affect SEO)")
    if length > 100:
        issues.append("URL too long (recommended: under 100 characters)")
    if not is_clean:
        issues.append("URL structure could be more SEO-friendly")
    return UrlStructure(is_clean=is_clean, has_parameters=has_parameters, length=length, issues=issues)


def page_speed_hint(html: str) -> PageSpeedHint:
    return PageSpeedHint(
        load_time=0,
        mobile_optimized="viewport" in html and "width=device-width" in html,
        issues=[] if "viewport" in html else ["Missing viewport meta tag for mobile"],
    )


async def analyze_technical_seo(url: str, html: str, fetcher: PageFetcher) -> Extraction[TechnicalSEOAnalysis]:
    origin = origin_of(url)
    user_agent = get_settings().seo_user_agent
    errors: List[str] = []

    sitemap_ok = False
    try:
        resp = await fetcher.fetch(f"{origin}/sitemap.xml", method="HEAD", user_agent=user_agent)
        sitemap_ok = resp.ok
    except FetchError as e:
        errors.append(f"sitemap: {e}")

    robots_ok = False
    robots_valid = False
    try:
        resp = await fetcher.fetch(f"{origin}/robots.txt", user_agent=user_agent)
        robots_ok = resp.ok
        robots_valid = resp.ok and "User-agent:" in resp.text
    except FetchError as e:
        errors.append(f"robots.txt: {e}")

    robots_issues = []
    if not robots_ok:
        robots_issues.append("robots.txt file not found")
    elif not robots_valid:
        robots_issues.append("robots.txt file invalid or empty")

    record = TechnicalSEOAnalysis(
        url_structure=analyze_url_structure(url),
        sitemap=SitemapStatus(
            is_present=sitemap_ok,
            is_accessible=sitemap_ok,
            issues=[] if sitemap_ok else ["XML sitemap not found"],
        ),
        robots_txt=RobotsTxtStatus(is_present=robots_ok, is_valid=robots_valid, issues=robots_issues),
        page_speed=page_speed_hint(html),
    )
    if errors:
        return Extraction(record=record, degraded=True, error="; ".join(errors))
    return Extraction.of(record)


# ── Social ─────────────────────────────────────────────────────────────────────

def analyze_social_media(html: str) -> SocialMediaAnalysis:
    og_title = first_capture(_OG_TITLE_RE, html)
    og_description = first_capture(_OG_DESCRIPTION_RE, html)
    og_image = first_capture(_OG_IMAGE_RE, html)
    card = first_capture(_TWITTER_CARD_RE, html)
    tw_title = first_capture(_TWITTER_TITLE_RE, html)
    tw_description = first_capture(_TWITTER_DESCRIPTION_RE, html)

    og_issues = []
    if not og_title:
        og_issues.append("Missing Open Graph title")
    if not og_description:
        og_issues.append("Missing Open Graph description")
    if not og_image:
        og_issues.append("Missing Open Graph image")

    tw_issues = []
    if not card:
        tw_issues.append("Missing Twitter Card type")
    if not tw_title:
        tw_issues.append("Missing Twitter Card title")
    if not tw_description:
        tw_issues.append("Missing Twitter Card description")

    return SocialMediaAnalysis(
        open_graph=OpenGraphTags(
            title=og_title,
            description=og_description,
            image=og_image,
            is_complete=bool(og_title and og_description and og_image),
            issues=og_issues,
        ),
        twitter_cards=TwitterCardTags(
            card=card,
            title=tw_title,
            description=tw_description,
            is_complete=bool(card and tw_title and tw_description),
            issues=tw_issues,
        ),
    )


# ── Structured data ────────────────────────────────────────────────────────────

def _json_ld_types(html: str) -> List[str]:
    types: List[str] = []
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(tag.string or "")
        except (ValueError, RecursionError):
            continue
        if not isinstance(data, dict):
            continue
        kind = data.get("@type")
        if isinstance(kind, str) and kind:
            types.append(kind)
        elif isinstance(kind, list):
            types.extend(k for k in kind if isinstance(k, str) and k)
    return types


def analyze_structured_data(html: str) -> StructuredDataAnalysis:
    schemas = _json_ld_types(html)
    for m in _ITEMTYPE_RE.finditer(html):
        kind = m.group(1).split("/")[-1]
        if kind and kind not in schemas:
            schemas.append(kind)

    issues = []
    if not schemas:
        issues.append("No structured data found")
    elif "Organization" not in schemas and "WebSite" not in schemas:
        issues.append("Consider adding Organization or WebSite schema")

    return StructuredDataAnalysis(
        schemas=schemas,
        is_present=bool(schemas),
        is_valid=bool(schemas),
        issues=issues,
    )
