"""
Performance signal extractors.

Load time comes from the real fetch; paint timings, coverage and cache
figures come from the injected SignalSource. Markup-derived counts
(images, stylesheets, scripts) are regex tallies over the fetched HTML.
"""
import math
import re

from ..config import get_settings
from ..exceptions import FetchError
from ..models import (
    CachingProfile, CoreWebVitals, CSSOptimization, ImageOptimization,
    JSOptimization, MobilePerformance, NetworkAnalysis, PerformanceMetrics,
    ResourceAnalysis, VitalMeasurement, VitalRating, VitalThreshold,
)
from ..utils.html import find_all
from .extraction import Extraction
from .fetcher import FetchResult, PageFetcher
from .signals import SignalSource

# (good, poor) cut-offs, inclusive on the good side
LCP_THRESHOLD = (2500, 4000)
FID_THRESHOLD = (100, 300)
CLS_THRESHOLD = (0.1, 0.25)

_IMG_SRC_RE = re.compile(r'<img[^>]+src="[^"]*"', re.IGNORECASE)
_STYLESHEET_RE = re.compile(r'<link[^>]+rel="stylesheet"[^>]*>', re.IGNORECASE)
_SCRIPT_SRC_RE = re.compile(r'<script[^>]*src="[^"]*"[^>]*>', re.IGNORECASE)
_SCRIPT_BLOCK_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)

SAVINGS_PER_IMAGE_KB = 50

METRICS_FAILED = PerformanceMetrics(
    load_time=10000,
    first_contentful_paint=5000,
    largest_contentful_paint=8000,
    first_input_delay=500,
    cumulative_layout_shift=0.5,
    total_blocking_time=1000,
    speed_index=8000,
)
RESOURCES_FAILED = ResourceAnalysis(
    total_size=0,
    image_optimization=ImageOptimization(unoptimized_images=0, potential_savings=0, formats=[]),
    css_optimization=CSSOptimization(unused_css=0, minification_savings=0, critical_css=False),
    js_optimization=JSOptimization(unused_js=0, minification_savings=0, bundle_size=0),
    caching=CachingProfile(cacheable=0, non_cacheable=100, cache_hit_ratio=0),
)
NETWORK_FAILED = NetworkAnalysis(
    requests=0,
    transfer_size=0,
    compression_ratio=1.0,
    http2=False,
    cdn=False,
    keep_alive=False,
)
MOBILE_FAILED = MobilePerformance(
    score=0,
    issues=["Failed to analyze mobile performance"],
    viewport=False,
    touch_targets=False,
    font_sizes=False,
)


def _int_header(response: FetchResult, name: str) -> int:
    try:
        return int(response.header(name) or "0")
    except ValueError:
        return 0


# ── Page load ──────────────────────────────────────────────────────────────────

def build_page_metrics(response: FetchResult, signals: SignalSource) -> PerformanceMetrics:
    timings = signals.paint_timings()
    return PerformanceMetrics(
        load_time=round(response.elapsed_ms),
        first_contentful_paint=timings.first_contentful_paint,
        largest_contentful_paint=timings.largest_contentful_paint,
        first_input_delay=timings.first_input_delay,
        cumulative_layout_shift=timings.cumulative_layout_shift,
        total_blocking_time=timings.total_blocking_time,
        speed_index=timings.speed_index,
    )


async def measure_page_load(url: str, fetcher: PageFetcher, signals: SignalSource) -> Extraction[PerformanceMetrics]:
    try:
        resp = await fetcher.fetch(url, user_agent=get_settings().performance_user_agent)
    except FetchError as e:
        return Extraction.failed(METRICS_FAILED, e)
    return Extraction.of(build_page_metrics(resp, signals))


# ── Core Web Vitals ────────────────────────────────────────────────────────────

def rate_vital(value: float, good: float, poor: float) -> VitalRating:
    if value <= good:
        return VitalRating.GOOD
    if value <= poor:
        return VitalRating.NEEDS_IMPROVEMENT
    return VitalRating.POOR


def _vital(value: float, cutoffs) -> VitalMeasurement:
    good, poor = cutoffs
    return VitalMeasurement(
        value=value,
        rating=rate_vital(value, good, poor),
        threshold=VitalThreshold(good=good, poor=poor),
    )


def analyze_core_web_vitals(metrics: PerformanceMetrics) -> CoreWebVitals:
    return CoreWebVitals(
        lcp=_vital(metrics.largest_contentful_paint, LCP_THRESHOLD),
        fid=_vital(metrics.first_input_delay, FID_THRESHOLD),
        cls=_vital(metrics.cumulative_layout_shift, CLS_THRESHOLD),
    )


# ── Resources ──────────────────────────────────────────────────────────────────

def build_resource_analysis(response: FetchResult, signals: SignalSource) -> ResourceAnalysis:
    html = response.text
    content_length = _int_header(response, "content-length")

    images = find_all(_IMG_SRC_RE, html)
    unoptimized = len([img for img in images if ".webp" not in img and ".avif" not in img])
    scripts = find_all(_SCRIPT_SRC_RE, html)
    script_blocks = find_all(_SCRIPT_BLOCK_RE, html)

    unused_css, css_savings = signals.css_coverage()
    unused_js, js_savings = signals.js_coverage()
    cacheable, non_cacheable, hit_ratio = signals.cache_profile()

    return ResourceAnalysis(
        total_size=content_length or len(html),
        image_optimization=ImageOptimization(
            unoptimized_images=unoptimized,
            potential_savings=unoptimized * SAVINGS_PER_IMAGE_KB,
            formats=["WebP", "AVIF", "Progressive JPEG"],
        ),
        css_optimization=CSSOptimization(
            unused_css=unused_css,
            minification_savings=css_savings,
            critical_css="critical" in html or "inline" in html,
        ),
        js_optimization=JSOptimization(
            unused_js=unused_js,
            minification_savings=js_savings,
            bundle_size=len(scripts) * 50 + len(script_blocks) * 20,
        ),
        caching=CachingProfile(
            cacheable=cacheable,
            non_cacheable=non_cacheable,
            cache_hit_ratio=hit_ratio,
        ),
    )


async def analyze_resources(url: str, fetcher: PageFetcher, signals: SignalSource) -> Extraction[ResourceAnalysis]:
    try:
        resp = await fetcher.fetch(url, user_agent=get_settings().performance_user_agent)
    except FetchError as e:
        return Extraction.failed(RESOURCES_FAILED, e)
    return Extraction.of(build_resource_analysis(resp, signals))


# ── Network ────────────────────────────────────────────────────────────────────

def build_network_analysis(response: FetchResult) -> NetworkAnalysis:
    html = response.text
    requests = (
        len(find_all(_IMG_SRC_RE, html))
        + len(find_all(_STYLESHEET_RE, html))
        + len(find_all(_SCRIPT_SRC_RE, html))
        + 1  # the document itself
    )
    server = response.header("server") or ""
    compressed = response.header("content-encoding") in ("gzip", "br")

    return NetworkAnalysis(
        requests=requests,
        transfer_size=_int_header(response, "content-length"),
        compression_ratio=0.7 if compressed else 1.0,
        http2="h2" in server,
        cdn=(
            "cloudflare" in server
            or response.header("x-served-by") is not None
            or response.header("x-cache") is not None
        ),
        keep_alive=response.header("connection") == "keep-alive",
    )


async def analyze_network(url: str, fetcher: PageFetcher) -> Extraction[NetworkAnalysis]:
    try:
        resp = await fetcher.fetch(url, user_agent=get_settings().performance_user_agent)
    except FetchError as e:
        return Extraction.failed(NETWORK_FAILED, e)
    return Extraction.of(build_network_analysis(resp))


# ── Mobile ─────────────────────────────────────────────────────────────────────

def build_mobile_performance(response: FetchResult, metrics: PerformanceMetrics) -> MobilePerformance:
    html = response.text
    viewport = "viewport" in html and "width=device-width" in html
    touch_targets = "onclick" not in html or "touch-action" in html
    font_sizes = "font-size: 1" not in html and "font-size:1" not in html

    issues = []
    if not viewport:
        issues.append("Missing responsive viewport meta tag")
    if not touch_targets:
        issues.append("Touch targets may be too small")
    if not font_sizes:
        issues.append("Font sizes may be too small for mobile")

    # mobile loads are modelled as 25% slower than desktop
    mobile_load_time = metrics.load_time * 1.25
    score = max(0, 100 - math.floor(mobile_load_time / 100) - len(issues) * 10)

    return MobilePerformance(
        score=score,
        issues=issues,
        viewport=viewport,
        touch_targets=touch_targets,
        font_sizes=font_sizes,
    )


async def analyze_mobile_performance(
    url: str, fetcher: PageFetcher, metrics: PerformanceMetrics
) -> Extraction[MobilePerformance]:
    try:
        resp = await fetcher.fetch(url, user_agent=get_settings().mobile_user_agent)
    except FetchError as e:
        return Extraction.failed(MOBILE_FAILED, e)
    return Extraction.of(build_mobile_performance(resp, metrics))
