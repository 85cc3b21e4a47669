"""
conftest.py — shared pytest fixtures
Adds the project root to sys.path so `webinspect.*` imports resolve correctly
regardless of where pytest is invoked from, and swaps the network fetcher
and measurement source for deterministic stand-ins.
"""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before get_settings() is first called
os.environ.setdefault("SIGNAL_SOURCE", "fixed")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")

from typing import Dict, List, Optional, Tuple, Union

import pytest
from fastapi.testclient import TestClient

from webinspect.exceptions import FetchError
from webinspect.main import app
from webinspect.middleware import rate_limit
from webinspect.services.fetcher import FetchResult, get_fetcher
from webinspect.services.signals import FixedSignalSource, get_signal_source


GOOD_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>WebInspect Demo Store - Handmade Goods Online</title>
  <meta name="description" content="Browse our collection of handmade goods crafted by local artisans. Free shipping on all orders over fifty dollars, easy returns and support.">
  <meta name="keywords" content="handmade, artisan, store">
  <meta name="robots" content="index, follow">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <link rel="canonical" href="https://example.com/">
  <meta property="og:title" content="WebInspect Demo Store">
  <meta property="og:description" content="Handmade goods from local artisans">
  <meta property="og:image" content="https://example.com/og.png">
  <meta name="twitter:card" content="summary">
  <meta name="twitter:title" content="WebInspect Demo Store">
  <meta name="twitter:description" content="Handmade goods from local artisans">
  <script type="application/ld+json">{"@context": "https://schema.org", "@type": "Organization", "name": "Demo"}</script>
</head>
<body>
  <a href="#main" class="skip-link">Skip to main content</a>
  <header><nav aria-label="Primary"><a href="/shop">Shop</a><a href="/about">About</a></nav></header>
  <main id="main">
    <h1>Handmade goods</h1>
    <h2>Featured</h2>
    <p>Every item is made by hand. We ship worldwide.</p>
    <img src="/img/vase.webp" alt="Blue ceramic vase">
    <form><label for="q">Search</label><input id="q" name="q"></form>
  </main>
  <footer>Contact us</footer>
</body>
</html>
"""

NO_H1_HTML = """<html><head><title>Short</title></head>
<body><h2>Only a subheading</h2><p>Hello there.</p></body></html>
"""


def page(
    html: str = "",
    status: int = 200,
    headers: Optional[Dict[str, str]] = None,
    url: str = "https://example.com/",
    elapsed_ms: float = 800.0,
) -> FetchResult:
    return FetchResult(
        url=url,
        status=status,
        headers={k.lower(): v for k, v in (headers or {}).items()},
        text=html,
        elapsed_ms=elapsed_ms,
    )


Outcome = Union[FetchResult, Exception]


class StubFetcher:
    """
    Stand-in for PageFetcher. ``routes`` maps a URL to a FetchResult or an
    exception to raise; unknown URLs answer 404 unless ``default`` is set.
    """

    def __init__(self, routes: Optional[Dict[str, Outcome]] = None, default: Optional[Outcome] = None):
        self.routes: Dict[str, Outcome] = dict(routes or {})
        self.default = default
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    async def fetch(self, url: str, method: str = "GET", user_agent: Optional[str] = None) -> FetchResult:
        self.calls.append((method, url, user_agent))
        outcome = self.routes.get(url, self.default)
        if outcome is None:
            return page(status=404, url=url)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def stub_fetcher():
    return StubFetcher()


@pytest.fixture
def signals():
    return FixedSignalSource()


@pytest.fixture
def good_site():
    """A well-built https site with sitemap and robots.txt."""
    return StubFetcher({
        "https://example.com/": page(
            GOOD_HTML,
            headers={
                "Strict-Transport-Security": "max-age=63072000",
                "Content-Security-Policy": "default-src 'self'",
                "X-Frame-Options": "DENY",
                "X-Content-Type-Options": "nosniff",
                "Referrer-Policy": "no-referrer",
                "Permissions-Policy": "camera=()",
                "Server": "cloudflare h2",
                "Content-Encoding": "br",
                "Connection": "keep-alive",
            },
        ),
        "https://example.com/sitemap.xml": page(url="https://example.com/sitemap.xml"),
        "https://example.com/robots.txt": page(
            "User-agent: *\nAllow: /\n", url="https://example.com/robots.txt"
        ),
    })


@pytest.fixture
def unreachable():
    return StubFetcher(default=FetchError("connection refused"))


@pytest.fixture
def client(stub_fetcher, signals):
    """Synchronous test client; no request ever leaves the process."""
    app.dependency_overrides[get_fetcher] = lambda: stub_fetcher
    app.dependency_overrides[get_signal_source] = lambda: signals
    rate_limit.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def safe_url():
    return "https://example.com"
