"""URL helpers: host extraction and normalization."""

from __future__ import annotations

from urllib.parse import urlparse


def extract_host(url: str) -> str | None:
    """Return the lowercased hostname without a leading ``www.``.

    Returns None for malformed or host-less URLs instead of raising.
    """
    if not url or not isinstance(url, str):
        return None
    try:
        parsed = urlparse(url.strip())
        host = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme or not host:
        return None
    host = host.lower().rstrip(".")
    if host.startswith("www."):
        host = host[4:]
    return host or None


def extract_domain(url: str) -> str:
    """Like :func:`extract_host` but returns "" when the URL has no host."""
    return extract_host(url) or ""


def extract_path(url: str) -> str:
    try:
        return urlparse(url.strip()).path or "/"
    except ValueError:
        return "/"


def normalize_url(url: str) -> str:
    """Dedup key: scheme + host + path, case-insensitive, trailing slash stripped.

    >>> normalize_url("https://Example.gob.es/Page/")
    'https://example.gob.es/page'
    """
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return url.strip().lower()
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    path = parsed.path.rstrip("/").lower()
    return f"{parsed.scheme.lower()}://{host}{path}"


def is_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def is_pdf_url(url: str | None) -> bool:
    if not url:
        return False
    return extract_path(url).lower().endswith(".pdf")
