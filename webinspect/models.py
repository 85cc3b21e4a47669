from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any, Union
from enum import Enum


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class VitalRating(str, Enum):
    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"
    POOR = "poor"


class WCAGLevel(str, Enum):
    A = "A"
    AA = "AA"
    AAA = "AAA"


class Record(BaseModel):
    """Immutable value record, serialised with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ─── Request Models ────────────────────────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    # Typed loosely so a non-string url yields our own 400 instead of a 422
    url: Optional[Any] = Field(None, description="The URL to audit")

    model_config = {
        "json_schema_extra": {
            "example": {
                "url": "example.com"
            }
        }
    }


# ─── Issues ────────────────────────────────────────────────────────────────────

class Issue(Record):
    severity: Severity
    category: str
    title: str
    description: str
    recommendation: str
    impact: str


class AccessibilityIssue(Issue):
    wcag_level: WCAGLevel
    element: Optional[str] = None


# ─── Security records ──────────────────────────────────────────────────────────

class SSLAnalysis(Record):
    is_secure: bool
    protocol: str
    cipher: str
    certificate_valid: bool
    certificate_expiry: Optional[str] = None
    issues: List[str] = []


class HeaderStatus(Record):
    present: bool
    value: Optional[str] = None
    recommendation: Optional[str] = None


class SecurityHeadersAnalysis(Record):
    score: int
    headers: Dict[str, HeaderStatus] = {}


class VulnerabilityAnalysis(Record):
    known_vulnerabilities: List[str] = []
    outdated_software: List[str] = []
    exposed_ports: List[int] = []
    suspicious_patterns: List[str] = []


class CertificateAnalysis(Record):
    issuer: str
    subject: str
    valid_from: str
    valid_to: str
    signature_algorithm: str
    key_size: int
    is_wildcard: bool


class SecurityDetails(Record):
    ssl: SSLAnalysis
    headers: SecurityHeadersAnalysis
    vulnerabilities: VulnerabilityAnalysis
    certificates: Optional[CertificateAnalysis] = None


class SecurityAnalysisResult(Record):
    url: str
    timestamp: str
    score: int
    issues: List[Issue] = []
    recommendations: List[str] = []
    details: SecurityDetails


# ─── Performance records ───────────────────────────────────────────────────────

class PerformanceMetrics(Record):
    load_time: float
    first_contentful_paint: float
    largest_contentful_paint: float
    first_input_delay: float
    cumulative_layout_shift: float
    total_blocking_time: float
    speed_index: float


class VitalThreshold(Record):
    good: Union[int, float]
    poor: Union[int, float]


class VitalMeasurement(Record):
    value: float
    rating: VitalRating
    threshold: VitalThreshold


class CoreWebVitals(Record):
    lcp: VitalMeasurement
    fid: VitalMeasurement
    cls: VitalMeasurement


class ImageOptimization(Record):
    unoptimized_images: int
    potential_savings: int
    formats: List[str] = []


class CSSOptimization(Record):
    unused_css: int = Field(alias="unusedCSS")
    minification_savings: int
    critical_css: bool = Field(alias="criticalCSS")


class JSOptimization(Record):
    unused_js: int = Field(alias="unusedJS")
    minification_savings: int
    bundle_size: int


class CachingProfile(Record):
    cacheable: int
    non_cacheable: int
    cache_hit_ratio: float


class ResourceAnalysis(Record):
    total_size: int
    image_optimization: ImageOptimization
    css_optimization: CSSOptimization
    js_optimization: JSOptimization
    caching: CachingProfile


class NetworkAnalysis(Record):
    requests: int
    transfer_size: int
    compression_ratio: float
    http2: bool
    cdn: bool
    keep_alive: bool


class MobilePerformance(Record):
    score: int
    issues: List[str] = []
    viewport: bool
    touch_targets: bool
    font_sizes: bool


class PerformanceDetails(Record):
    core_web_vitals: CoreWebVitals
    resource_analysis: ResourceAnalysis
    network_analysis: NetworkAnalysis
    mobile_performance: MobilePerformance


class PerformanceAnalysisResult(Record):
    url: str
    timestamp: str
    score: int
    grade: str
    metrics: PerformanceMetrics
    issues: List[Issue] = []
    recommendations: List[str] = []
    details: PerformanceDetails


# ─── SEO records ───────────────────────────────────────────────────────────────

class LengthCheckedTag(Record):
    content: str
    length: int
    is_optimal: bool
    issues: List[str] = []


class OptionalTag(Record):
    content: str
    is_present: bool
    issues: List[str] = []


class CanonicalTag(Record):
    url: str
    is_present: bool
    issues: List[str] = []


class MetaTagsAnalysis(Record):
    title: LengthCheckedTag
    description: LengthCheckedTag
    keywords: OptionalTag
    robots: OptionalTag
    canonical: CanonicalTag


class HeadingSummary(Record):
    h1_count: int
    h2_count: int
    h3_count: int
    structure: List[str] = []
    issues: List[str] = []


class ContentSummary(Record):
    word_count: int
    readability_score: float
    keyword_density: float = 0
    issues: List[str] = []


class ImageSummary(Record):
    total: int
    with_alt: int
    without_alt: int
    issues: List[str] = []


class LinkSummary(Record):
    internal: int
    external: int
    broken: int = 0
    issues: List[str] = []


class ContentAnalysis(Record):
    headings: HeadingSummary
    content: ContentSummary
    images: ImageSummary
    links: LinkSummary


class UrlStructure(Record):
    is_clean: bool
    has_parameters: bool
    length: int
    issues: List[str] = []


class SitemapStatus(Record):
    is_present: bool
    is_accessible: bool
    issues: List[str] = []


class RobotsTxtStatus(Record):
    is_present: bool
    is_valid: bool
    issues: List[str] = []


class PageSpeedHint(Record):
    load_time: float = 0
    mobile_optimized: bool
    issues: List[str] = []


class TechnicalSEOAnalysis(Record):
    url_structure: UrlStructure
    sitemap: SitemapStatus
    robots_txt: RobotsTxtStatus
    page_speed: PageSpeedHint


class OpenGraphTags(Record):
    title: str
    description: str
    image: str
    is_complete: bool
    issues: List[str] = []


class TwitterCardTags(Record):
    card: str
    title: str
    description: str
    is_complete: bool
    issues: List[str] = []


class SocialMediaAnalysis(Record):
    open_graph: OpenGraphTags
    twitter_cards: TwitterCardTags


class StructuredDataAnalysis(Record):
    schemas: List[str] = []
    is_present: bool
    is_valid: bool
    issues: List[str] = []


class SEODetails(Record):
    meta_tags: MetaTagsAnalysis
    content_analysis: ContentAnalysis
    technical_seo: TechnicalSEOAnalysis = Field(alias="technicalSEO")
    social_media: SocialMediaAnalysis
    structured_data: StructuredDataAnalysis


class SEOAnalysisResult(Record):
    url: str
    timestamp: str
    score: int
    grade: str
    issues: List[Issue] = []
    recommendations: List[str] = []
    details: SEODetails


# ─── Accessibility records ─────────────────────────────────────────────────────

class ContrastSample(Record):
    ratio: float
    is_compliant: bool
    wcag_level: str
    foreground: str
    background: str


class ColorContrast(Record):
    average_ratio: float
    failing_elements: int
    total_elements: int
    worst_contrast: ContrastSample


class ImageAudit(Record):
    total: int
    with_alt_text: int
    missing_alt_text: int
    decorative_images: int


class FormAudit(Record):
    total: int
    with_labels: int
    missing_labels: int
    with_fieldsets: int


class HeadingAudit(Record):
    has_h1: bool
    proper_hierarchy: bool
    skipped_levels: int
    total_headings: int
    # needed for the multiple-H1 issue, not part of the response
    h1_count: int = Field(0, exclude=True)


class AriaAudit(Record):
    landmarks_present: bool
    aria_labels_used: int
    aria_described_by_used: int
    role_attributes_used: int


class KeyboardAudit(Record):
    focusable_elements: int
    tab_index_issues: int
    skip_links_present: bool
    focus_traps_implemented: bool = False


class WCAGCompliance(Record):
    level_a: int = Field(alias="levelA")
    level_aa: int = Field(alias="levelAA")
    level_aaa: int = Field(alias="levelAAA")


class AccessibilityDetails(Record):
    color_contrast: ColorContrast
    images: ImageAudit
    forms: FormAudit
    headings: HeadingAudit
    aria: AriaAudit
    keyboard: KeyboardAudit


class AccessibilityAnalysisResult(Record):
    url: str
    timestamp: str
    score: int
    grade: str
    wcag_compliance: WCAGCompliance
    issues: List[AccessibilityIssue] = []
    recommendations: List[str] = []
    details: AccessibilityDetails


# ─── Aggregate scan ────────────────────────────────────────────────────────────

class ScanReport(Record):
    url: str
    timestamp: str
    overall_score: Optional[int] = None
    summary: str
    security: Optional[SecurityAnalysisResult] = None
    performance: Optional[PerformanceAnalysisResult] = None
    seo: Optional[SEOAnalysisResult] = None
    accessibility: Optional[AccessibilityAnalysisResult] = None
    errors: Dict[str, str] = {}
