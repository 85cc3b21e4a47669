"""
Endpoint tests through FastAPI's TestClient. The fetcher and signal source
are replaced via dependency_overrides (see conftest.py).
"""
import asyncio
from types import SimpleNamespace

import pytest

from conftest import page
from webinspect.exceptions import FetchError
from webinspect.services import audits
from webinspect.middleware import rate_limit


@pytest.fixture
def good(client, stub_fetcher, good_site):
    stub_fetcher.routes.update(good_site.routes)
    return client


# ─── Validation ────────────────────────────────────────────────────────────────

class TestValidation:
    @pytest.mark.parametrize("path", [
        "/api/security/analyze", "/api/performance/analyze", "/api/seo/analyze",
        "/api/accessibility", "/api/accessibility/analyze", "/api/scan",
    ])
    def test_not_a_url(self, client, path):
        r = client.post(path, json={"url": "not a url"})
        assert r.status_code == 400
        assert r.json() == {"error": "Invalid URL format"}

    @pytest.mark.parametrize("body", [{}, {"url": ""}, {"url": 42}])
    def test_missing_url(self, client, body):
        r = client.post("/api/security/analyze", json=body)
        assert r.status_code == 400
        assert r.json() == {"error": "Valid URL is required"}

    def test_no_body(self, client):
        r = client.post("/api/seo/analyze")
        assert r.status_code == 400
        assert r.json()["error"] == "Valid URL is required"

    def test_validation_happens_before_fetching(self, client, stub_fetcher):
        client.post("/api/performance/analyze", json={"url": "not a url"})
        assert stub_fetcher.calls == []


# ─── Security ──────────────────────────────────────────────────────────────────

class TestSecurityEndpoint:
    def test_good_site(self, good):
        r = good.post("/api/security/analyze", json={"url": "example.com"})
        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        data = body["data"]
        assert data["url"] == "https://example.com/"
        assert data["score"] == 100
        assert data["issues"] == []
        assert data["details"]["certificates"]["subject"] == "example.com"
        assert data["details"]["headers"]["headers"]["x-frame-options"]["present"] is True

    def test_http_site_gets_critical_issue(self, client, stub_fetcher):
        stub_fetcher.routes["http://example.com/"] = page(url="http://example.com/")
        data = client.post("/api/security/analyze", json={"url": "http://example.com"}).json()["data"]
        assert data["issues"][0]["title"] == "No HTTPS Encryption"
        assert data["issues"][0]["severity"] == "critical"
        assert data["details"]["ssl"]["isSecure"] is False
        assert data["details"]["certificates"] is None

    def test_unreachable_site_still_answers(self, client, stub_fetcher):
        stub_fetcher.default = FetchError("connection refused")
        r = client.post("/api/security/analyze", json={"url": "example.com"})
        assert r.status_code == 200
        assert r.json()["data"]["details"]["ssl"]["issues"] == ["Failed to analyze SSL configuration"]

    def test_unexpected_error_is_500(self, client, stub_fetcher):
        stub_fetcher.default = RuntimeError("bug")
        r = client.post("/api/security/analyze", json={"url": "example.com"})
        assert r.status_code == 500
        assert r.json() == {"error": "Security analysis failed"}


# ─── Performance ───────────────────────────────────────────────────────────────

class TestPerformanceEndpoint:
    def test_good_site(self, good):
        data = good.post("/api/performance/analyze", json={"url": "https://example.com"}).json()["data"]
        assert data["grade"] == "A"
        assert 90 <= data["score"] <= 100
        assert data["metrics"]["loadTime"] == 800
        assert data["details"]["coreWebVitals"]["lcp"]["rating"] == "good"
        assert data["details"]["resourceAnalysis"]["cssOptimization"]["unusedCSS"] == 10
        assert data["recommendations"][-2:] == [
            "Enable gzip/brotli compression for text-based resources",
            "Implement lazy loading for images and non-critical resources",
        ]

    def test_timeout_is_504(self, client, stub_fetcher, monkeypatch):
        async def slow_fetch(url, method="GET", user_agent=None):
            await asyncio.sleep(5)

        stub_fetcher.fetch = slow_fetch
        monkeypatch.setattr(audits, "get_settings", lambda: SimpleNamespace(audit_timeout_seconds=0.05))
        r = client.post("/api/performance/analyze", json={"url": "example.com"})
        assert r.status_code == 504
        assert r.json() == {"error": "Performance analysis timed out"}


# ─── SEO ───────────────────────────────────────────────────────────────────────

class TestSEOEndpoint:
    def test_good_site(self, good):
        data = good.post("/api/seo/analyze", json={"url": "example.com"}).json()["data"]
        assert data["score"] == 95
        assert data["grade"] == "A"
        assert data["details"]["technicalSEO"]["robotsTxt"]["isValid"] is True
        assert data["details"]["structuredData"]["schemas"] == ["Organization"]
        assert [i["title"] for i in data["issues"]] == ["Insufficient Content"]

    def test_page_not_found_is_400(self, client):
        r = client.post("/api/seo/analyze", json={"url": "example.com"})
        assert r.status_code == 400
        assert r.json() == {"error": "Failed to fetch page content"}

    def test_network_error_is_400(self, client, stub_fetcher):
        stub_fetcher.default = FetchError("dns failure")
        r = client.post("/api/seo/analyze", json={"url": "example.com"})
        assert r.status_code == 400


# ─── Accessibility ─────────────────────────────────────────────────────────────

class TestAccessibilityEndpoint:
    @pytest.mark.parametrize("path", ["/api/accessibility", "/api/accessibility/analyze"])
    def test_good_site(self, good, path):
        data = good.post(path, json={"url": "example.com"}).json()["data"]
        assert data["score"] == 100
        assert data["grade"] == "A+"
        assert data["wcagCompliance"] == {"levelA": 100, "levelAA": 100, "levelAAA": 100}
        assert data["details"]["colorContrast"]["averageRatio"] == 7.0
        assert "h1Count" not in data["details"]["headings"]

    def test_zero_h1_medium_issue(self, client, stub_fetcher):
        stub_fetcher.routes["https://example.com/"] = page("<main><h2>No main heading</h2></main>")
        data = client.post("/api/accessibility", json={"url": "example.com"}).json()["data"]
        issue = data["issues"][0]
        assert issue["title"] == "Missing H1 Heading"
        assert issue["severity"] == "medium"
        assert issue["wcagLevel"] == "AA"

    def test_unreachable_page_is_500(self, client):
        r = client.post("/api/accessibility", json={"url": "example.com"})
        assert r.status_code == 500
        assert r.json() == {"error": "Accessibility analysis failed"}


# ─── Full scan ─────────────────────────────────────────────────────────────────

class TestScanEndpoint:
    def test_good_site(self, good):
        data = good.post("/api/scan", json={"url": "example.com"}).json()["data"]
        assert data["errors"] == {}
        assert data["overallScore"] >= 90
        assert data["summary"].startswith("Overall site health is excellent")
        for domain in ("security", "performance", "seo", "accessibility"):
            assert data[domain]["url"] == "https://example.com/"

    def test_failed_domains_are_null(self, client):
        # every URL answers 404: security and performance still run
        data = client.post("/api/scan", json={"url": "example.com"}).json()["data"]
        assert data["seo"] is None
        assert data["accessibility"] is None
        assert data["errors"] == {
            "seo": "Failed to fetch page content",
            "accessibility": "Failed to fetch page content",
        }
        both = data["security"]["score"] + data["performance"]["score"]
        assert data["overallScore"] == int(both / 2 + 0.5)
        assert "seo audit failed" in data["summary"]


# ─── Service endpoints and middleware ──────────────────────────────────────────

class TestServiceEndpoints:
    def test_root(self, client):
        assert client.get("/").json()["service"] == "WebInspect API"

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_health_head(self, client):
        assert client.head("/health").status_code == 200


def _limits(per_minute, trust_forwarded_for=False):
    return SimpleNamespace(rate_limit_per_minute=per_minute, trust_forwarded_for=trust_forwarded_for)


class TestRateLimit:
    def test_limit_applies_to_analyze_paths(self, client, monkeypatch):
        monkeypatch.setattr(rate_limit, "get_settings", lambda: _limits(2))
        codes = [client.post("/api/seo/analyze", json={"url": "not a url"}).status_code for _ in range(3)]
        assert codes == [400, 400, 429]

    def test_get_requests_are_not_limited(self, client, monkeypatch):
        monkeypatch.setattr(rate_limit, "get_settings", lambda: _limits(1))
        assert all(client.get("/health").status_code == 200 for _ in range(3))

    def test_forwarded_for_ignored_by_default(self, client, monkeypatch):
        monkeypatch.setattr(rate_limit, "get_settings", lambda: _limits(1))
        codes = [
            client.post("/api/scan", json={}, headers={"X-Forwarded-For": f"203.0.113.{i}"}).status_code
            for i in range(2)
        ]
        assert codes == [400, 429]

    def test_forwarded_for_used_behind_proxy(self, client, monkeypatch):
        monkeypatch.setattr(rate_limit, "get_settings", lambda: _limits(1, trust_forwarded_for=True))
        codes = [
            client.post("/api/scan", json={}, headers={"X-Forwarded-For": f"203.0.113.{i}"}).status_code
            for i in range(2)
        ]
        assert codes == [400, 400]

    def test_idle_clients_are_forgotten(self):
        rate_limit.reset()
        rate_limit._log["198.51.100.1"].append(0.0)
        rate_limit._log["198.51.100.2"].append(100.0)
        rate_limit.sweep(120.0)
        assert list(rate_limit._log) == ["198.51.100.2"]
        rate_limit.reset()
