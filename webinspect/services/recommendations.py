"""
Recommendation lists per audit domain.

Conditional priority items come first, followed by a fixed tail of general
advice. Items are not deduplicated against each other or against issues.
"""
from typing import List, Sequence

from ..models import (
    ContentAnalysis, Issue, NetworkAnalysis, ResourceAnalysis,
    SecurityHeadersAnalysis, Severity, SSLAnalysis, VulnerabilityAnalysis,
)

PERFORMANCE_TAIL = [
    "Enable gzip/brotli compression for text-based resources",
    "Implement lazy loading for images and non-critical resources",
]

SEO_TAIL = [
    "Create and submit XML sitemap to search engines",
    "Implement structured data markup for rich snippets",
    "Optimize for mobile devices with responsive design",
    "Add Open Graph tags for better social media sharing",
]

ACCESSIBILITY_TAIL = [
    "Implement keyboard navigation testing in your development workflow",
    "Use automated accessibility testing tools during development",
    "Conduct user testing with assistive technology users",
]


def security_recommendations(
    ssl: SSLAnalysis,
    headers: SecurityHeadersAnalysis,
    vulnerabilities: VulnerabilityAnalysis,
) -> List[str]:
    recs = []
    if not ssl.is_secure:
        recs.append("Implement HTTPS encryption across your entire website")
    for status in headers.headers.values():
        if not status.present and status.recommendation:
            recs.append(status.recommendation)
    if vulnerabilities.outdated_software:
        recs.append("Update outdated software and libraries to latest secure versions")
    if vulnerabilities.suspicious_patterns:
        recs.append("Review code for potential security vulnerabilities and implement input validation")
    return recs


def performance_recommendations(
    issues: Sequence[Issue],
    resources: ResourceAnalysis,
    network: NetworkAnalysis,
) -> List[str]:
    recs = []
    if any(i.category == "Core Web Vitals" and i.severity == Severity.CRITICAL for i in issues):
        recs.append("Focus on Core Web Vitals optimization as top priority for SEO and user experience")
    if resources.image_optimization.unoptimized_images > 0:
        recs.append("Implement next-generation image formats (WebP, AVIF) and responsive images")
    if resources.css_optimization.unused_css > 15 or resources.js_optimization.unused_js > 20:
        recs.append("Audit and remove unused CSS/JavaScript to reduce bundle sizes")
    if not network.cdn:
        recs.append("Implement a Content Delivery Network (CDN) for global performance improvement")
    if network.requests > 50:
        recs.append("Optimize resource loading with bundling, minification, and compression")
    if resources.caching.cache_hit_ratio < 0.8:
        recs.append("Implement proper caching strategies for static assets")
    return recs + PERFORMANCE_TAIL


def seo_recommendations(issues: Sequence[Issue], content: ContentAnalysis) -> List[str]:
    recs = []
    if any(i.category == "Meta Tags" and i.severity == Severity.CRITICAL for i in issues):
        recs.append("Optimize title tags and meta descriptions as top priority")
    if content.headings.h1_count == 0:
        recs.append("Add a unique, descriptive H1 heading to each page")
    if content.content.word_count < 300:
        recs.append("Expand content with valuable, relevant information")
    if content.images.without_alt > 0:
        recs.append("Add descriptive alt text to all images for accessibility and SEO")
    return recs + SEO_TAIL


def accessibility_recommendations(issues: Sequence[Issue]) -> List[str]:
    recs = []
    if any(i.severity == Severity.CRITICAL for i in issues):
        recs.append("Address critical accessibility issues immediately to ensure basic usability")
    if any(i.severity == Severity.HIGH for i in issues):
        recs.append("Fix high-priority issues to improve screen reader compatibility")
    return recs + ACCESSIBILITY_TAIL
