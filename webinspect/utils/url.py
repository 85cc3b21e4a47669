"""
Audit target normalisation.

Bare domains get ``https://``, an empty path becomes ``/`` and the host is
lower-cased, so ``example.com`` and ``HTTPS://Example.com`` both normalise to
``https://example.com/``.
"""
import ipaddress
import re
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from ..exceptions import InvalidURLError

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
_LABEL_RE = re.compile(r"^[a-z0-9_]([a-z0-9_\-]*[a-z0-9_])?$")
_DEFAULT_PORTS = {("http", 80), ("https", 443)}


def _valid_hostname(host: str) -> bool:
    if not host or len(host) > 253:
        return False
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass
    labels = host.rstrip(".").split(".")
    return all(_LABEL_RE.match(label) for label in labels)


def normalize_url(raw: Any) -> str:
    """Return the canonical http(s) form of ``raw`` or raise InvalidURLError."""
    if not raw or not isinstance(raw, str):
        raise InvalidURLError("Valid URL is required")

    url = raw.strip()
    if not _SCHEME_RE.match(url):
        url = f"https://{url}"

    try:
        parts = urlsplit(url)
        port = parts.port  # raises on a malformed port
    except ValueError:
        raise InvalidURLError()

    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidURLError()
    host = (parts.hostname or "").lower()
    if not host.isascii():
        try:
            host = host.encode("idna").decode("ascii")
        except UnicodeError:
            raise InvalidURLError()
    if not _valid_hostname(host):
        raise InvalidURLError()
    netloc = host
    if ":" in host:
        netloc = f"[{host}]"
    if port is not None and (parts.scheme.lower(), port) not in _DEFAULT_PORTS:
        netloc = f"{netloc}:{port}"
    if parts.username:
        creds = parts.username + (f":{parts.password}" if parts.password else "")
        netloc = f"{creds}@{netloc}"

    path = (parts.path or "/").replace(" ", "%20")
    query = parts.query.replace(" ", "%20")
    return urlunsplit((parts.scheme.lower(), netloc, path, query, parts.fragment))


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"
