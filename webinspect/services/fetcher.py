"""
Async page fetcher built on aiohttp.

Every extractor goes through ``PageFetcher.fetch`` so one place owns timeouts,
user agents and the private-network guard. Network failures surface as
``FetchError``; HTTP error statuses do not raise, callers decide what a 404
means for them.
"""
import asyncio
import ipaddress
import time
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urljoin, urlsplit

import aiohttp

from ..config import get_settings
from ..exceptions import FetchError

BLOCKED = [
    ipaddress.ip_network("10.0.0.0/8"), ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"), ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"), ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("::1/128"), ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]

REDIRECT_STATUSES = {301, 302, 303, 307, 308}
MAX_REDIRECTS = 10


def is_blocked_address(ip_str: str) -> bool:
    try:
        ip = ipaddress.ip_address(ip_str.split("%", 1)[0])
    except ValueError:
        return False
    # ::ffff:a.b.c.d reaches the IPv4 host
    if getattr(ip, "ipv4_mapped", None) is not None:
        ip = ip.ipv4_mapped
    return any(ip in net for net in BLOCKED)


@dataclass(frozen=True)
class FetchResult:
    url: str
    status: int
    headers: Dict[str, str] = field(default_factory=dict)  # lower-cased names
    text: str = ""
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


class PageFetcher:
    """Thin wrapper around a shared ``aiohttp.ClientSession``."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        timeout_seconds: Optional[int] = None,
        block_private_networks: Optional[bool] = None,
    ):
        settings = get_settings()
        self._session = session
        self._timeout = timeout_seconds or settings.request_timeout_seconds
        self._block_private = (
            settings.block_private_networks if block_private_networks is None else block_private_networks
        )

    async def _assert_public(self, url: str) -> None:
        host = urlsplit(url).hostname
        if not host:
            raise FetchError(f"No host in {url}")
        try:
            ipaddress.ip_address(host)
            addresses = [host]
        except ValueError:
            loop = asyncio.get_running_loop()
            try:
                infos = await loop.getaddrinfo(host, None)
            except OSError as e:
                raise FetchError(f"DNS lookup failed for {host}: {e}") from e
            addresses = [sa[0] for *_, sa in infos]
        if any(is_blocked_address(a) for a in addresses):
            raise FetchError(f"{host} resolves to a private network address")

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        user_agent: Optional[str] = None,
    ) -> FetchResult:
        """
        Redirects are followed here rather than inside aiohttp so that every
        hop goes through the private-network guard.
        """
        headers = {"User-Agent": user_agent} if user_agent else {}
        start = time.monotonic()
        current = url
        try:
            for _ in range(MAX_REDIRECTS + 1):
                if self._block_private:
                    await self._assert_public(current)
                async with self._session.request(
                    method,
                    current,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self._timeout),
                    allow_redirects=False,
                    ssl=False,  # certificate trust is not what these audits measure
                ) as resp:
                    location = resp.headers.get("Location")
                    if resp.status in REDIRECT_STATUSES and location:
                        current = urljoin(str(resp.url), location)
                        continue
                    return await self._read(resp, method, start)
        except asyncio.TimeoutError as e:
            raise FetchError(f"Request to {url} timed out after {self._timeout}s") from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Request to {url} failed: {str(e)[:120]}") from e
        raise FetchError(f"Request to {url} exceeded {MAX_REDIRECTS} redirects")

    @staticmethod
    async def _read(resp: aiohttp.ClientResponse, method: str, start: float) -> FetchResult:
        elapsed_ms = (time.monotonic() - start) * 1000
        merged: Dict[str, str] = {}
        for name, value in resp.headers.items():
            key = name.lower()
            merged[key] = f"{merged[key]}, {value}" if key in merged else value
        body = ""
        if method.upper() != "HEAD":
            body = await resp.text(errors="replace")
        return FetchResult(
            url=str(resp.url),
            status=resp.status,
            headers=merged,
            text=body,
            elapsed_ms=round(elapsed_ms, 2),
        )


async def get_fetcher():
    """FastAPI dependency: one ClientSession per request, closed afterwards."""
    async with aiohttp.ClientSession() as session:
        yield PageFetcher(session)
