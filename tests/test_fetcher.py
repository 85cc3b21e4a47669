"""
PageFetcher tests — SSRF guard, redirects, header handling and error conversion.
No sockets are opened: the aiohttp session is replaced by a fake.
"""
import asyncio
from unittest.mock import MagicMock

import aiohttp
import pytest

from webinspect.exceptions import FetchError
from webinspect.services.fetcher import MAX_REDIRECTS, FetchResult, PageFetcher, is_blocked_address


class _FakeHeaders(list):
    """(name, value) pairs with the bits of CIMultiDictProxy the fetcher uses."""

    def items(self):
        return list(self)

    def get(self, name, default=None):
        for key, value in self:
            if key.lower() == name.lower():
                return value
        return default


class _FakeResponse:
    def __init__(self, status=200, headers=(), body="<html></html>", url="https://example.com/"):
        self.status = status
        self.url = url
        self.headers = _FakeHeaders(headers)
        self._body = body
        self.text_called = False

    async def text(self, errors="strict"):
        self.text_called = True
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def _redirect(url, location, status=302):
    return _FakeResponse(status=status, headers=[("Location", location)], body="", url=url)


class _FakeSession:
    """Answers with ``responses`` in order; the last one repeats."""

    def __init__(self, response=None, error=None, responses=None):
        self.responses = list(responses or [response])
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


# ─── SSRF Protection ───────────────────────────────────────────────────────────

class TestSSRFProtection:
    @pytest.mark.parametrize("ip", [
        "127.0.0.1", "10.0.0.1", "172.31.255.255", "192.168.1.1",
        "169.254.169.254", "0.0.0.0", "::1", "fd00::1",
    ])
    def test_private_addresses_blocked(self, ip):
        assert is_blocked_address(ip) is True

    @pytest.mark.parametrize("ip", ["8.8.8.8", "93.184.216.34", "2606:4700::1111"])
    def test_public_addresses_allowed(self, ip):
        assert is_blocked_address(ip) is False

    def test_invalid_ip_returns_false(self):
        assert is_blocked_address("not-an-ip") is False

    @pytest.mark.parametrize("ip", ["::ffff:127.0.0.1", "::ffff:169.254.169.254", "::ffff:10.1.2.3"])
    def test_ipv4_mapped_private_addresses_blocked(self, ip):
        assert is_blocked_address(ip) is True

    def test_ipv4_mapped_public_address_allowed(self):
        assert is_blocked_address("::ffff:8.8.8.8") is False

    @pytest.mark.parametrize("ip", ["fe80::1", "fe80::1%eth0"])
    def test_ipv6_link_local_blocked(self, ip):
        assert is_blocked_address(ip) is True

    @pytest.mark.asyncio
    async def test_ipv4_mapped_literal_target_refused(self):
        session = MagicMock()
        with pytest.raises(FetchError):
            await PageFetcher(session, block_private_networks=True).fetch("http://[::ffff:127.0.0.1]/")
        session.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_redirect_to_private_address_refused(self):
        session = _FakeSession(responses=[
            _redirect("http://93.184.216.34/", "http://169.254.169.254/latest/meta-data/"),
            _FakeResponse(body="secret", url="http://169.254.169.254/latest/meta-data/"),
        ])
        with pytest.raises(FetchError):
            await PageFetcher(session, block_private_networks=True).fetch("http://93.184.216.34/")
        assert [u for _, u, _ in session.calls] == ["http://93.184.216.34/"]

    @pytest.mark.asyncio
    async def test_public_redirect_followed(self):
        session = _FakeSession(responses=[
            _redirect("http://93.184.216.34/", "/home", status=301),
            _FakeResponse(body="home", url="http://93.184.216.34/home"),
        ])
        result = await PageFetcher(session, block_private_networks=True).fetch("http://93.184.216.34/")
        assert result.status == 200
        assert result.text == "home"
        assert result.url == "http://93.184.216.34/home"
        assert [u for _, u, _ in session.calls] == ["http://93.184.216.34/", "http://93.184.216.34/home"]

    @pytest.mark.asyncio
    async def test_redirect_loop_gives_up(self):
        session = _FakeSession(_redirect("http://93.184.216.34/", "http://93.184.216.34/"))
        with pytest.raises(FetchError):
            await PageFetcher(session, block_private_networks=True).fetch("http://93.184.216.34/")
        assert len(session.calls) == MAX_REDIRECTS + 1

    @pytest.mark.asyncio
    async def test_redirect_without_location_is_returned(self):
        session = _FakeSession(_FakeResponse(status=302, body=""))
        result = await PageFetcher(session, block_private_networks=False).fetch("https://example.com/")
        assert result.status == 302

    @pytest.mark.asyncio
    async def test_literal_private_target_refused(self):
        session = MagicMock()
        fetcher = PageFetcher(session, block_private_networks=True)
        with pytest.raises(FetchError):
            await fetcher.fetch("http://127.0.0.1:8080/")
        session.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_guard_can_be_disabled(self):
        session = _FakeSession(_FakeResponse())
        fetcher = PageFetcher(session, block_private_networks=False)
        result = await fetcher.fetch("http://127.0.0.1/")
        assert result.status == 200


# ─── Requests and responses ────────────────────────────────────────────────────

class TestFetch:
    @pytest.mark.asyncio
    async def test_headers_lowercased_and_merged(self):
        headers = [("Set-Cookie", "a=1"), ("set-cookie", "b=2"), ("Server", "nginx")]
        session = _FakeSession(_FakeResponse(headers=headers))
        result = await PageFetcher(session, block_private_networks=False).fetch("https://example.com/")
        assert result.header("SET-COOKIE") == "a=1, b=2"
        assert result.header("server") == "nginx"
        assert result.text == "<html></html>"

    @pytest.mark.asyncio
    async def test_head_skips_body(self):
        response = _FakeResponse()
        session = _FakeSession(response)
        result = await PageFetcher(session, block_private_networks=False).fetch(
            "https://example.com/", method="HEAD", user_agent="Tester/1.0"
        )
        assert result.text == ""
        assert response.text_called is False
        method, _, kwargs = session.calls[0]
        assert method == "HEAD"
        assert kwargs["headers"] == {"User-Agent": "Tester/1.0"}
        assert kwargs["allow_redirects"] is False

    @pytest.mark.asyncio
    async def test_client_error_becomes_fetch_error(self):
        session = _FakeSession(error=aiohttp.ClientConnectionError("refused"))
        with pytest.raises(FetchError):
            await PageFetcher(session, block_private_networks=False).fetch("https://example.com/")

    @pytest.mark.asyncio
    async def test_timeout_becomes_fetch_error(self):
        session = _FakeSession(error=asyncio.TimeoutError())
        with pytest.raises(FetchError) as exc:
            await PageFetcher(session, timeout_seconds=3, block_private_networks=False).fetch("https://example.com/")
        assert "timed out after 3s" in str(exc.value)

    def test_ok_is_2xx_only(self):
        assert FetchResult(url="u", status=204).ok
        assert not FetchResult(url="u", status=301).ok
        assert not FetchResult(url="u", status=404).ok
