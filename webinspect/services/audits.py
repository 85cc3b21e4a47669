"""
webinspect/services/audits.py
Domain pipelines: fetch → extract → score → issues → recommendations.

Extractors within a domain run concurrently; the four domains of a full scan
run concurrently too and fail independently.
"""
import asyncio
import logging
from typing import Awaitable, Dict, Optional, TypeVar

from ..config import get_settings
from ..exceptions import AnalysisTimeout, PageFetchError
from ..models import (
    AccessibilityAnalysisResult, AccessibilityDetails, PerformanceAnalysisResult,
    PerformanceDetails, ScanReport, SecurityAnalysisResult, SecurityDetails,
    SEOAnalysisResult, SEODetails,
)
from ..utils.dates import iso_timestamp
from . import accessibility_checks, performance_checks, security_checks, seo_checks
from .extraction import settle
from .fetcher import PageFetcher
from .issue_generator import (
    accessibility_issues, performance_issues, security_issues, seo_issues,
)
from .recommendations import (
    accessibility_recommendations, performance_recommendations,
    security_recommendations, seo_recommendations,
)
from .score_calculator import (
    accessibility_grade, calculate_accessibility_score, calculate_overall_score,
    calculate_performance_score, calculate_security_score, calculate_seo_score,
    generate_summary, letter_grade,
)
from .signals import SignalSource

logger = logging.getLogger(__name__)

T = TypeVar("T")

DOMAIN_LABELS: Dict[str, str] = {
    "security": "Security",
    "performance": "Performance",
    "seo": "SEO",
    "accessibility": "Accessibility",
}


async def with_timeout(aw: Awaitable[T], seconds: Optional[int] = None) -> T:
    seconds = seconds or get_settings().audit_timeout_seconds
    try:
        return await asyncio.wait_for(aw, timeout=seconds)
    except asyncio.TimeoutError as e:
        raise AnalysisTimeout(f"analysis exceeded {seconds}s") from e


# ── Security ───────────────────────────────────────────────────────────────────

async def audit_security(url: str, fetcher: PageFetcher) -> SecurityAnalysisResult:
    ssl_x, headers_x, vulns_x = await asyncio.gather(
        security_checks.analyze_ssl(url, fetcher),
        security_checks.analyze_security_headers(url, fetcher),
        security_checks.analyze_vulnerabilities(url, fetcher),
    )
    settle("security", url, ssl=ssl_x, headers=headers_x, vulnerabilities=vulns_x)
    ssl, headers, vulns = ssl_x.record, headers_x.record, vulns_x.record

    return SecurityAnalysisResult(
        url=url,
        timestamp=iso_timestamp(),
        score=calculate_security_score(ssl, headers, vulns),
        issues=security_issues(ssl, headers, vulns),
        recommendations=security_recommendations(ssl, headers, vulns),
        details=SecurityDetails(
            ssl=ssl,
            headers=headers,
            vulnerabilities=vulns,
            certificates=security_checks.analyze_certificate(url),
        ),
    )


# ── Performance ────────────────────────────────────────────────────────────────

async def audit_performance(url: str, fetcher: PageFetcher, signals: SignalSource) -> PerformanceAnalysisResult:
    metrics_x = await performance_checks.measure_page_load(url, fetcher, signals)
    metrics = metrics_x.record

    resources_x, network_x, mobile_x = await asyncio.gather(
        performance_checks.analyze_resources(url, fetcher, signals),
        performance_checks.analyze_network(url, fetcher),
        performance_checks.analyze_mobile_performance(url, fetcher, metrics),
    )
    settle("performance", url, metrics=metrics_x, resources=resources_x, network=network_x, mobile=mobile_x)

    vitals = performance_checks.analyze_core_web_vitals(metrics)
    resources, network, mobile = resources_x.record, network_x.record, mobile_x.record
    score = calculate_performance_score(vitals, resources, network)
    issues = performance_issues(vitals, resources, network, mobile)

    return PerformanceAnalysisResult(
        url=url,
        timestamp=iso_timestamp(),
        score=score,
        grade=letter_grade(score),
        metrics=metrics,
        issues=issues,
        recommendations=performance_recommendations(issues, resources, network),
        details=PerformanceDetails(
            core_web_vitals=vitals,
            resource_analysis=resources,
            network_analysis=network,
            mobile_performance=mobile,
        ),
    )


# ── SEO ────────────────────────────────────────────────────────────────────────

async def audit_seo(url: str, fetcher: PageFetcher) -> SEOAnalysisResult:
    """Raises PageFetchError when the page itself cannot be fetched."""
    html = await seo_checks.fetch_page(url, fetcher)

    technical_x = await seo_checks.analyze_technical_seo(url, html, fetcher)
    settle("seo", url, technical=technical_x)

    meta = seo_checks.analyze_meta_tags(html)
    content = seo_checks.analyze_content(html, url)
    technical = technical_x.record
    social = seo_checks.analyze_social_media(html)
    structured = seo_checks.analyze_structured_data(html)

    score = calculate_seo_score(meta, content, technical, social, structured)
    issues = seo_issues(meta, content, technical, social, structured)

    return SEOAnalysisResult(
        url=url,
        timestamp=iso_timestamp(),
        score=score,
        grade=letter_grade(score),
        issues=issues,
        recommendations=seo_recommendations(issues, content),
        details=SEODetails(
            meta_tags=meta,
            content_analysis=content,
            technical_seo=technical,
            social_media=social,
            structured_data=structured,
        ),
    )


# ── Accessibility ──────────────────────────────────────────────────────────────

async def audit_accessibility(url: str, fetcher: PageFetcher, signals: SignalSource) -> AccessibilityAnalysisResult:
    """Raises PageFetchError when the page cannot be fetched or is not 2xx."""
    html = await accessibility_checks.fetch_page(url, fetcher)

    contrast = accessibility_checks.analyze_color_contrast(html, signals)
    images = accessibility_checks.analyze_images(html)
    forms = accessibility_checks.analyze_forms(html)
    headings = accessibility_checks.analyze_headings(html)
    aria = accessibility_checks.analyze_aria(html)
    keyboard = accessibility_checks.analyze_keyboard(html)

    issues = accessibility_issues(images, forms, headings, aria, keyboard)
    score = calculate_accessibility_score(contrast, images, forms, headings, aria, keyboard)

    return AccessibilityAnalysisResult(
        url=url,
        timestamp=iso_timestamp(),
        score=score,
        grade=accessibility_grade(score),
        wcag_compliance=accessibility_checks.calculate_wcag_compliance(issues),
        issues=issues,
        recommendations=accessibility_recommendations(issues),
        details=AccessibilityDetails(
            color_contrast=contrast,
            images=images,
            forms=forms,
            headings=headings,
            aria=aria,
            keyboard=keyboard,
        ),
    )


# ── Full scan ──────────────────────────────────────────────────────────────────

async def _scan_domain(domain: str, url: str, aw: Awaitable[T], errors: Dict[str, str]) -> Optional[T]:
    label = DOMAIN_LABELS[domain]
    try:
        return await with_timeout(aw)
    except AnalysisTimeout:
        logger.warning("%s analysis timed out for %s", label, url)
        errors[domain] = f"{label} analysis timed out"
    except PageFetchError as e:
        logger.warning("%s page fetch failed: %s", label, e)
        errors[domain] = "Failed to fetch page content"
    except Exception:
        logger.exception("%s analysis failed for %s", label, url)
        errors[domain] = f"{label} analysis failed"
    return None


async def run_full_scan(url: str, fetcher: PageFetcher, signals: SignalSource) -> ScanReport:
    errors: Dict[str, str] = {}
    security, performance, seo, accessibility = await asyncio.gather(
        _scan_domain("security", url, audit_security(url, fetcher), errors),
        _scan_domain("performance", url, audit_performance(url, fetcher, signals), errors),
        _scan_domain("seo", url, audit_seo(url, fetcher), errors),
        _scan_domain("accessibility", url, audit_accessibility(url, fetcher, signals), errors),
    )
    results = {
        "security": security,
        "performance": performance,
        "seo": seo,
        "accessibility": accessibility,
    }
    overall = calculate_overall_score(
        {domain: (r.score if r is not None else None) for domain, r in results.items()}
    )
    logger.info("Scan of %s finished: overall=%s failed=%s", url, overall, sorted(errors))

    return ScanReport(
        url=url,
        timestamp=iso_timestamp(),
        overall_score=overall,
        summary=generate_summary(overall, results),
        security=security,
        performance=performance,
        seo=seo,
        accessibility=accessibility,
        errors=errors,
    )
