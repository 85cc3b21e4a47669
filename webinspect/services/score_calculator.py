"""
webinspect/services/score_calculator.py
Per-domain audit scores (0–100), letter grades, and the overall scan score
and summary string.

Every scorer starts from 100, applies fixed penalties or weighted blends,
then rounds half-up and clamps, so degenerate inputs still land in range.
"""
import math
from typing import Any, Dict, Optional

from ..models import (
    AriaAudit, ColorContrast, ContentAnalysis, CoreWebVitals, FormAudit,
    HeadingAudit, ImageAudit, KeyboardAudit, MetaTagsAnalysis, NetworkAnalysis,
    ResourceAnalysis, SecurityHeadersAnalysis, SocialMediaAnalysis, SSLAnalysis,
    StructuredDataAnalysis, TechnicalSEOAnalysis, VitalRating, VulnerabilityAnalysis,
)

VITAL_POINTS: Dict[VitalRating, int] = {
    VitalRating.GOOD: 100,
    VitalRating.NEEDS_IMPROVEMENT: 70,
    VitalRating.POOR: 40,
}

# SEO sub-score weights, must sum to 1
SEO_WEIGHTS: Dict[str, float] = {
    "meta": 0.30,
    "content": 0.25,
    "technical": 0.25,
    "social": 0.10,
    "structured": 0.10,
}

# Overall scan weights, must sum to 100
DOMAIN_WEIGHTS: Dict[str, int] = {
    "security": 25,
    "performance": 25,
    "seo": 25,
    "accessibility": 25,
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    if value != value:  # NaN
        return 0
    return max(0, min(100, round_half_up(value)))


# ── Grades ─────────────────────────────────────────────────────────────────────

def letter_grade(score: int) -> str:
    """Performance / SEO grade."""
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"


def accessibility_grade(score: int) -> str:
    if score >= 95:
        return "A+"
    if score >= 85:
        return "A"
    if score >= 75:
        return "B"
    if score >= 65:
        return "C"
    if score >= 50:
        return "D"
    return "F"


# ── Security ───────────────────────────────────────────────────────────────────

def calculate_security_score(
    ssl: SSLAnalysis,
    headers: SecurityHeadersAnalysis,
    vulnerabilities: VulnerabilityAnalysis,
) -> int:
    score = 100.0
    if not ssl.is_secure:
        score -= 30
    score -= len(ssl.issues) * 5

    score = score * 0.7 + headers.score * 0.3

    score -= len(vulnerabilities.known_vulnerabilities) * 15
    score -= len(vulnerabilities.outdated_software) * 10
    score -= len(vulnerabilities.suspicious_patterns) * 8
    return clamp_score(score)


# ── Performance ────────────────────────────────────────────────────────────────

def web_vitals_average(vitals: CoreWebVitals) -> float:
    points = [VITAL_POINTS[v.rating] for v in (vitals.lcp, vitals.fid, vitals.cls)]
    return sum(points) / 3


def resource_score(resources: ResourceAnalysis) -> float:
    return max(
        0,
        100
        - resources.image_optimization.unoptimized_images * 5
        - resources.css_optimization.unused_css
        - resources.js_optimization.unused_js,
    )


def network_score(network: NetworkAnalysis) -> float:
    return max(0, 100 - max(0, network.requests - 50) * 2)


def calculate_performance_score(
    vitals: CoreWebVitals,
    resources: ResourceAnalysis,
    network: NetworkAnalysis,
) -> int:
    score = 100.0
    score = score * 0.6 + web_vitals_average(vitals) * 0.4
    score = score * 0.7 + resource_score(resources) * 0.3
    score = score * 0.7 + network_score(network) * 0.3
    return clamp_score(score)


# ── SEO ────────────────────────────────────────────────────────────────────────

def seo_subscores(
    meta: MetaTagsAnalysis,
    content: ContentAnalysis,
    technical: TechnicalSEOAnalysis,
    social: SocialMediaAnalysis,
    structured: StructuredDataAnalysis,
) -> Dict[str, int]:
    meta_score = 100
    if not meta.title.is_optimal:
        meta_score -= 20
    if not meta.description.is_optimal:
        meta_score -= 20
    if not meta.canonical.is_present:
        meta_score -= 10

    content_score = 100
    if content.headings.h1_count == 0:
        content_score -= 25
    if content.headings.h1_count > 1:
        content_score -= 15
    if content.content.word_count < 300:
        content_score -= 20
    if content.images.without_alt > 0:
        content_score -= 15

    technical_score = 100
    if not technical.sitemap.is_present:
        technical_score -= 20
    if not technical.robots_txt.is_present:
        technical_score -= 15
    if not technical.url_structure.is_clean:
        technical_score -= 15
    if not technical.page_speed.mobile_optimized:
        technical_score -= 20

    social_score = 100
    if not social.open_graph.is_complete:
        social_score -= 50
    if not social.twitter_cards.is_complete:
        social_score -= 30

    return {
        "meta": meta_score,
        "content": content_score,
        "technical": technical_score,
        "social": social_score,
        "structured": 100 if structured.is_present else 50,
    }


def calculate_seo_score(
    meta: MetaTagsAnalysis,
    content: ContentAnalysis,
    technical: TechnicalSEOAnalysis,
    social: SocialMediaAnalysis,
    structured: StructuredDataAnalysis,
) -> int:
    parts = seo_subscores(meta, content, technical, social, structured)
    return clamp_score(sum(parts[k] * w for k, w in SEO_WEIGHTS.items()))


# ── Accessibility ──────────────────────────────────────────────────────────────

def calculate_accessibility_score(
    contrast: ColorContrast,
    images: ImageAudit,
    forms: FormAudit,
    headings: HeadingAudit,
    aria: AriaAudit,
    keyboard: KeyboardAudit,
) -> int:
    score = 100
    if contrast.average_ratio < 4.5:
        score -= 20
    if images.missing_alt_text > 0:
        score -= min(25, images.missing_alt_text * 5)
    if forms.missing_labels > 0:
        score -= min(20, forms.missing_labels * 10)
    if not headings.has_h1:
        score -= 15
    if not aria.landmarks_present:
        score -= 10
    if not keyboard.skip_links_present and keyboard.focusable_elements > 5:
        score -= 10
    return clamp_score(score)


# ── Overall scan ───────────────────────────────────────────────────────────────

def calculate_overall_score(scores: Dict[str, Optional[int]]) -> Optional[int]:
    """
    Weighted average of the domain scores.
    Domains that failed (None) are skipped with their weight excluded,
    so a partial scan still produces a fair score.
    """
    total_weight = 0.0
    weighted_sum = 0.0
    for domain, weight in DOMAIN_WEIGHTS.items():
        val = scores.get(domain)
        if val is None:
            continue
        total_weight += weight
        weighted_sum += max(0, min(100, val)) * weight

    if total_weight == 0:
        return None
    return round_half_up(weighted_sum / total_weight)


def generate_summary(score: Optional[int], results: Dict[str, Any]) -> str:
    """Short human-readable summary of a full scan."""
    if score is None:
        return "Scan could not be completed for any audit domain."

    if score >= 80:
        label = "excellent"
    elif score >= 60:
        label = "good"
    elif score >= 40:
        label = "fair"
    else:
        label = "poor"

    findings = []
    for domain, result in results.items():
        if result is None:
            findings.append(f"{domain} audit failed")
            continue
        critical = sum(1 for i in result.issues if i.severity == "critical")
        if critical:
            findings.append(f"{critical} critical {domain} issue(s)")
        elif result.score < 50:
            findings.append(f"weak {domain} ({result.score}/100)")

    summary = f"Overall site health is {label} ({score}/100)."
    if findings:
        summary += f" Key findings: {', '.join(findings)}."
    else:
        summary += " No critical issues detected."
    return summary
