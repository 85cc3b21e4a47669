"""
webinspect/services/issue_generator.py
Turns extractor records into ordered, human-readable findings.

Rule order is fixed per domain and list-valued triggers (outdated software,
suspicious patterns, mobile issues) expand to one finding each.
"""
from typing import List

from ..models import (
    AccessibilityIssue, AriaAudit, ContentAnalysis, CoreWebVitals, FormAudit,
    HeadingAudit, ImageAudit, Issue, KeyboardAudit, MetaTagsAnalysis,
    MobilePerformance, NetworkAnalysis, ResourceAnalysis, SecurityHeadersAnalysis,
    Severity, SocialMediaAnalysis, SSLAnalysis, StructuredDataAnalysis,
    TechnicalSEOAnalysis, VitalRating, VulnerabilityAnalysis, WCAGLevel,
)
from .score_calculator import round_half_up


def _header_present(headers: SecurityHeadersAnalysis, name: str) -> bool:
    status = headers.headers.get(name)
    return bool(status and status.present)


# ── Security ───────────────────────────────────────────────────────────────────

def security_issues(
    ssl: SSLAnalysis,
    headers: SecurityHeadersAnalysis,
    vulnerabilities: VulnerabilityAnalysis,
) -> List[Issue]:
    issues: List[Issue] = []

    if not ssl.is_secure:
        issues.append(Issue(
            severity=Severity.CRITICAL,
            category="Encryption",
            title="No HTTPS Encryption",
            description="Website does not use HTTPS encryption, making data transmission vulnerable to interception.",
            recommendation="Implement SSL/TLS certificate and redirect all HTTP traffic to HTTPS",
            impact="Credentials and personal data can be read or altered in transit",
        ))

    if not _header_present(headers, "strict-transport-security"):
        issues.append(Issue(
            severity=Severity.HIGH,
            category="Security Headers",
            title="Missing HSTS Header",
            description="HTTP Strict Transport Security header is not configured.",
            recommendation="Add Strict-Transport-Security header to prevent protocol downgrade attacks",
            impact="Visitors can be downgraded to unencrypted HTTP by an attacker on the network",
        ))

    if not _header_present(headers, "content-security-policy"):
        issues.append(Issue(
            severity=Severity.HIGH,
            category="Security Headers",
            title="Missing Content Security Policy",
            description="No Content Security Policy header found.",
            recommendation="Implement CSP header to prevent XSS and data injection attacks",
            impact="Injected scripts run with full access to the page",
        ))

    for software in vulnerabilities.outdated_software:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="Software",
            title="Outdated Software Detected",
            description=f"Outdated software detected: {software}",
            recommendation="Update to the latest secure version",
            impact="Publicly known vulnerabilities may be exploitable",
        ))

    for pattern in vulnerabilities.suspicious_patterns:
        issues.append(Issue(
            severity=Severity.HIGH,
            category="Code Security",
            title="Potential Security Vulnerability",
            description=pattern,
            recommendation="Review and secure the identified code patterns",
            impact="Unsafe code patterns are a common entry point for injection attacks",
        ))

    return issues


# ── Performance ────────────────────────────────────────────────────────────────

def performance_issues(
    vitals: CoreWebVitals,
    resources: ResourceAnalysis,
    network: NetworkAnalysis,
    mobile: MobilePerformance,
) -> List[Issue]:
    issues: List[Issue] = []

    if vitals.lcp.rating == VitalRating.POOR:
        issues.append(Issue(
            severity=Severity.CRITICAL,
            category="Core Web Vitals",
            title="Poor Largest Contentful Paint",
            description=f"LCP is {round_half_up(vitals.lcp.value)}ms, which is above the recommended 2.5s threshold.",
            recommendation="Optimize images, remove unused CSS/JS, and improve server response times",
            impact="Directly affects Google search rankings and user experience",
        ))

    if vitals.fid.rating == VitalRating.POOR:
        issues.append(Issue(
            severity=Severity.HIGH,
            category="Core Web Vitals",
            title="Poor First Input Delay",
            description=f"FID is {round_half_up(vitals.fid.value)}ms, which is above the recommended 100ms threshold.",
            recommendation="Reduce JavaScript execution time and break up long tasks",
            impact="Poor interactivity affects user engagement",
        ))

    if vitals.cls.rating == VitalRating.POOR:
        issues.append(Issue(
            severity=Severity.HIGH,
            category="Core Web Vitals",
            title="Poor Cumulative Layout Shift",
            description=f"CLS is {vitals.cls.value:.3f}, which is above the recommended 0.1 threshold.",
            recommendation="Set dimensions for images and ads, avoid inserting content above existing content",
            impact="Layout shifts frustrate users and hurt search rankings",
        ))

    images = resources.image_optimization
    if images.unoptimized_images > 5:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="Image Optimization",
            title="Unoptimized Images",
            description=f"{images.unoptimized_images} images could be optimized for better performance.",
            recommendation="Convert images to WebP/AVIF format and implement responsive images",
            impact=f"Potential savings of {images.potential_savings}KB",
        ))

    css = resources.css_optimization
    if css.unused_css > 20:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="CSS Optimization",
            title="Unused CSS",
            description=f"Approximately {css.unused_css}% of CSS is unused.",
            recommendation="Remove unused CSS and implement critical CSS loading",
            impact=f"Potential savings of {css.minification_savings}%",
        ))

    js = resources.js_optimization
    if js.unused_js > 25:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="JavaScript Optimization",
            title="Unused JavaScript",
            description=f"Approximately {js.unused_js}% of JavaScript is unused.",
            recommendation="Implement code splitting and remove unused JavaScript",
            impact=f"Potential savings of {js.minification_savings}%",
        ))

    if network.requests > 100:
        issues.append(Issue(
            severity=Severity.HIGH,
            category="Network",
            title="Too Many HTTP Requests",
            description=f"{network.requests} HTTP requests detected, which can slow down page loading.",
            recommendation="Combine files, use CSS sprites, and implement resource bundling",
            impact="Each additional request adds latency",
        ))

    if not network.http2:
        issues.append(Issue(
            severity=Severity.LOW,
            category="Network",
            title="HTTP/1.1 Protocol",
            description="Website is not using HTTP/2 protocol for improved performance.",
            recommendation="Enable HTTP/2 on your server for better multiplexing",
            impact="HTTP/2 can improve loading performance by 10-20%",
        ))

    if not network.cdn:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="Network",
            title="No CDN Detected",
            description="No Content Delivery Network detected for static assets.",
            recommendation="Implement a CDN to serve static assets from locations closer to users",
            impact="CDN can reduce loading times by 20-50% globally",
        ))

    for problem in mobile.issues:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="Mobile Performance",
            title="Mobile Optimization Issue",
            description=problem,
            recommendation="Implement responsive design best practices",
            impact="Mobile users represent 50%+ of web traffic",
        ))

    return issues


# ── SEO ────────────────────────────────────────────────────────────────────────

def seo_issues(
    meta: MetaTagsAnalysis,
    content: ContentAnalysis,
    technical: TechnicalSEOAnalysis,
    social: SocialMediaAnalysis,
    structured: StructuredDataAnalysis,
) -> List[Issue]:
    issues: List[Issue] = []

    if meta.title.issues:
        issues.append(Issue(
            severity=Severity.CRITICAL,
            category="Meta Tags",
            title="Title Tag Issues",
            description=", ".join(meta.title.issues),
            recommendation="Optimize title tag to 30-60 characters with target keywords",
            impact="Title tags are crucial for search rankings and click-through rates",
        ))

    if meta.description.issues:
        issues.append(Issue(
            severity=Severity.HIGH,
            category="Meta Tags",
            title="Meta Description Issues",
            description=", ".join(meta.description.issues),
            recommendation="Write compelling meta description of 120-160 characters",
            impact="Meta descriptions affect click-through rates from search results",
        ))

    h1_count = content.headings.h1_count
    if h1_count == 0:
        issues.append(Issue(
            severity=Severity.CRITICAL,
            category="Content Structure",
            title="Missing H1 Heading",
            description="No H1 heading found on the page",
            recommendation="Add a unique H1 heading that describes the page content",
            impact="H1 headings help search engines understand page topic",
        ))

    if h1_count > 1:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="Content Structure",
            title="Multiple H1 Headings",
            description=f"{h1_count} H1 headings found",
            recommendation="Use only one H1 heading per page for better SEO",
            impact="Multiple H1s can confuse search engines about page focus",
        ))

    if content.content.word_count < 300:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="Content Quality",
            title="Insufficient Content",
            description=f"Only {content.content.word_count} words found",
            recommendation="Add more valuable content (recommended: 300+ words)",
            impact="Thin content may not rank well in search results",
        ))

    if content.images.without_alt > 0:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="Image Optimization",
            title="Missing Alt Text",
            description=f"{content.images.without_alt} images missing alt text",
            recommendation="Add descriptive alt text to all images",
            impact="Alt text improves accessibility and image search rankings",
        ))

    if not technical.sitemap.is_present:
        issues.append(Issue(
            severity=Severity.HIGH,
            category="Technical SEO",
            title="Missing XML Sitemap",
            description="No XML sitemap found",
            recommendation="Create and submit XML sitemap to search engines",
            impact="Sitemaps help search engines discover and index pages",
        ))

    if not technical.robots_txt.is_present:
        issues.append(Issue(
            severity=Severity.MEDIUM,
            category="Technical SEO",
            title="Missing Robots.txt",
            description="No robots.txt file found",
            recommendation="Create robots.txt file to guide search engine crawling",
            impact="Robots.txt helps control how search engines access your site",
        ))

    if not technical.page_speed.mobile_optimized:
        issues.append(Issue(
            severity=Severity.HIGH,
            category="Mobile SEO",
            title="Not Mobile Optimized",
            description="Missing viewport meta tag for mobile optimization",
            recommendation="Add viewport meta tag and ensure responsive design",
            impact="Mobile optimization is crucial for search rankings",
        ))

    if not social.open_graph.is_complete:
        issues.append(Issue(
            severity=Severity.LOW,
            category="Social Media",
            title="Incomplete Open Graph Tags",
            description="Missing Open Graph title, description, or image",
            recommendation="Add complete Open Graph tags for better social sharing",
            impact="Open Graph tags control how content appears when shared",
        ))

    if not structured.is_present:
        issues.append(Issue(
            severity=Severity.LOW,
            category="Structured Data",
            title="No Structured Data",
            description="No structured data markup found",
            recommendation="Add JSON-LD structured data for better search visibility",
            impact="Structured data can enable rich snippets in search results",
        ))

    return issues


# ── Accessibility ──────────────────────────────────────────────────────────────

def accessibility_issues(
    images: ImageAudit,
    forms: FormAudit,
    headings: HeadingAudit,
    aria: AriaAudit,
    keyboard: KeyboardAudit,
) -> List[AccessibilityIssue]:
    issues: List[AccessibilityIssue] = []

    if images.missing_alt_text > 0:
        issues.append(AccessibilityIssue(
            severity=Severity.HIGH,
            category="Images",
            title="Missing Alt Text",
            description=f"{images.missing_alt_text} images are missing alternative text",
            wcag_level=WCAGLevel.A,
            element="img",
            recommendation='Add descriptive alt text to all images or use alt="" for decorative images',
            impact="Screen readers cannot describe images to visually impaired users",
        ))

    if forms.missing_labels > 0:
        issues.append(AccessibilityIssue(
            severity=Severity.HIGH,
            category="Forms",
            title="Form Fields Missing Labels",
            description=f"{forms.missing_labels} form fields are missing proper labels",
            wcag_level=WCAGLevel.A,
            element="input",
            recommendation="Associate all form fields with descriptive labels using <label> elements",
            impact="Users with screen readers cannot understand form field purposes",
        ))

    if not headings.has_h1:
        issues.append(AccessibilityIssue(
            severity=Severity.MEDIUM,
            category="Headings",
            title="Missing H1 Heading",
            description="Page is missing a main H1 heading",
            wcag_level=WCAGLevel.AA,
            element="h1",
            recommendation="Add a single, descriptive H1 heading to the page",
            impact="Screen readers and SEO tools cannot identify the main page topic",
        ))

    if headings.h1_count > 1:
        issues.append(AccessibilityIssue(
            severity=Severity.MEDIUM,
            category="Headings",
            title="Multiple H1 Headings",
            description=f"Page has {headings.h1_count} H1 headings, should have only one",
            wcag_level=WCAGLevel.AA,
            element="h1",
            recommendation="Use only one H1 heading per page for the main title",
            impact="Confuses screen readers and affects content hierarchy",
        ))

    if not aria.landmarks_present:
        issues.append(AccessibilityIssue(
            severity=Severity.MEDIUM,
            category="ARIA",
            title="Missing Landmark Elements",
            description="Page lacks semantic landmark elements for navigation",
            wcag_level=WCAGLevel.AA,
            element="semantic elements",
            recommendation="Use semantic HTML5 elements like <main>, <nav>, <header>, <footer>",
            impact="Screen reader users cannot easily navigate page sections",
        ))

    if not keyboard.skip_links_present and keyboard.focusable_elements > 5:
        issues.append(AccessibilityIssue(
            severity=Severity.MEDIUM,
            category="Keyboard Navigation",
            title="Missing Skip Links",
            description="Page lacks skip navigation links for keyboard users",
            wcag_level=WCAGLevel.A,
            element="navigation",
            recommendation='Add "Skip to main content" links at the beginning of the page',
            impact="Keyboard users must tab through all navigation to reach main content",
        ))

    return issues
