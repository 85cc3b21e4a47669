"""
Security signal extractors: transport, response headers, vulnerable
patterns and certificate details.

Certificate data is not read from the TLS handshake; a secure target gets a
fixed, plausible certificate profile and an insecure one gets none.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from urllib.parse import urlsplit

from ..config import get_settings
from ..exceptions import FetchError
from ..utils.dates import iso_timestamp
from ..models import (
    CertificateAnalysis, HeaderStatus, SecurityHeadersAnalysis, SSLAnalysis,
    VulnerabilityAnalysis,
)
from .extraction import Extraction
from .fetcher import FetchResult, PageFetcher

# header name → advice shown when it is missing
SECURITY_HEADERS: Dict[str, str] = {
    "strict-transport-security": "Enable HSTS to prevent protocol downgrade attacks",
    "content-security-policy": "Implement CSP to prevent XSS attacks",
    "x-frame-options": "Set X-Frame-Options to prevent clickjacking",
    "x-content-type-options": "Set X-Content-Type-Options to prevent MIME sniffing",
    "referrer-policy": "Set Referrer-Policy to control referrer information",
    "permissions-policy": "Set Permissions-Policy to control browser features",
}

OUTDATED_SERVERS = ("Apache/2.2", "nginx/1.1")
_JQUERY_RE = re.compile(r"jquery[/-](\d+\.\d+\.\d+)", re.IGNORECASE)

SSL_FAILED = SSLAnalysis(
    is_secure=False,
    protocol="Unknown",
    cipher="Unknown",
    certificate_valid=False,
    certificate_expiry=None,
    issues=["Failed to analyze SSL configuration"],
)
HEADERS_FAILED = SecurityHeadersAnalysis(score=0, headers={})
VULNERABILITIES_FAILED = VulnerabilityAnalysis(
    suspicious_patterns=["Failed to analyze for vulnerabilities"],
)


def is_secure_url(url: str) -> bool:
    return urlsplit(url).scheme == "https"


# ── SSL ────────────────────────────────────────────────────────────────────────

def build_ssl_analysis(url: str, response: FetchResult, now: Optional[datetime] = None) -> SSLAnalysis:
    now = now or datetime.now(timezone.utc)
    secure = is_secure_url(url)
    issues = []
    if not secure:
        issues.append("Website does not use HTTPS encryption")
    csp = response.header("content-security-policy")
    if secure and csp and "http:" in csp:
        issues.append("Potential mixed content detected")

    return SSLAnalysis(
        is_secure=secure,
        protocol="TLS" if secure else "HTTP",
        cipher="TLS_AES_256_GCM_SHA384",
        certificate_valid=secure,
        certificate_expiry=iso_timestamp(now + timedelta(days=365)) if secure else None,
        issues=issues,
    )


async def analyze_ssl(url: str, fetcher: PageFetcher) -> Extraction[SSLAnalysis]:
    try:
        resp = await fetcher.fetch(url, method="HEAD", user_agent=get_settings().security_user_agent)
    except FetchError as e:
        return Extraction.failed(SSL_FAILED, e)
    return Extraction.of(build_ssl_analysis(url, resp))


# ── Headers ────────────────────────────────────────────────────────────────────

def build_headers_analysis(response: FetchResult) -> SecurityHeadersAnalysis:
    headers = {
        name: HeaderStatus(
            present=response.header(name) is not None,
            value=response.header(name) or None,
            recommendation=advice,
        )
        for name, advice in SECURITY_HEADERS.items()
    }
    present = sum(1 for h in headers.values() if h.present)
    score = round(present / len(SECURITY_HEADERS) * 100)
    return SecurityHeadersAnalysis(score=score, headers=headers)


async def analyze_security_headers(url: str, fetcher: PageFetcher) -> Extraction[SecurityHeadersAnalysis]:
    try:
        resp = await fetcher.fetch(url, method="HEAD", user_agent=get_settings().security_user_agent)
    except FetchError as e:
        return Extraction.failed(HEADERS_FAILED, e)
    return Extraction.of(build_headers_analysis(resp))


# ── Vulnerabilities ────────────────────────────────────────────────────────────

def _leading_float(version: str) -> float:
    """``3.4.1`` → 3.4, the way a loose numeric parse reads a version."""
    m = re.match(r"\d+(\.\d+)?", version)
    return float(m.group(0)) if m else 0.0


def build_vulnerability_analysis(response: FetchResult) -> VulnerabilityAnalysis:
    html = response.text
    outdated = []
    suspicious = []

    if "eval(" in html or "innerHTML" in html:
        suspicious.append("Potential XSS vulnerability detected")
    if "mysql_query" in html or "SELECT * FROM" in html:
        suspicious.append("Potential SQL injection vulnerability")

    m = _JQUERY_RE.search(html)
    if m and _leading_float(m.group(1)) < 3.5:
        outdated.append(f"jQuery {m.group(1)} (outdated, security vulnerabilities)")

    server = response.header("server")
    if server and any(s in server for s in OUTDATED_SERVERS):
        outdated.append(f"{server} (outdated version detected)")

    return VulnerabilityAnalysis(
        known_vulnerabilities=[],
        outdated_software=outdated,
        exposed_ports=[],  # port scanning is out of scope
        suspicious_patterns=suspicious,
    )


async def analyze_vulnerabilities(url: str, fetcher: PageFetcher) -> Extraction[VulnerabilityAnalysis]:
    try:
        resp = await fetcher.fetch(url, user_agent=get_settings().security_user_agent)
    except FetchError as e:
        return Extraction.failed(VULNERABILITIES_FAILED, e)
    return Extraction.of(build_vulnerability_analysis(resp))


# ── Certificate ────────────────────────────────────────────────────────────────

def analyze_certificate(url: str, now: Optional[datetime] = None) -> Optional[CertificateAnalysis]:
    """Fabricated certificate profile for https targets, None otherwise."""
    if not is_secure_url(url):
        return None
    now = now or datetime.now(timezone.utc)
    host = urlsplit(url).hostname or ""
    return CertificateAnalysis(
        issuer="Let's Encrypt Authority X3",
        subject=host,
        valid_from=iso_timestamp(now - timedelta(days=30)),
        valid_to=iso_timestamp(now + timedelta(days=60)),
        signature_algorithm="SHA256-RSA",
        key_size=2048,
        is_wildcard=False,
    )
