"""
Fetching IIIF documents and checking user-entered URLs.

The HTTP layer only moves bytes. Parsing lives in ``parser`` so the same
bytes can be decoded in the TUI and in batch mode.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

import httpx

from loam_iiif.errors import InvalidURLError


DEFAULT_TIMEOUT = 30.0

INVALID_URL_MESSAGE = "Invalid URL format"
MISSING_SCHEME_MESSAGE = "URL must include http:// or https://"
EMPTY_URL_MESSAGE = "Please enter a URL"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_ALLOWED_SCHEMES = ("http", "https")


def fetch_bytes(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> bytes:
    """
    Fetch raw document bytes from URL.

    Parameters:
        url: HTTP(S) URL to fetch
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        Response body

    Raises:
        httpx.HTTPStatusError: If the server answers with a non-2xx status
        httpx.HTTPError: If the request fails (timeouts included)
    """
    with httpx.Client(timeout=timeout, follow_redirects=True, transport=transport) as client:
        resp = client.get(url)
        resp.raise_for_status()
        return resp.content


def describe_fetch_error(exc: Exception) -> str:
    """
    Short, single-line description of a fetch failure for the status line.

    Example:
        >>> describe_fetch_error(status_error)  # 404 response
        'failed to fetch data: 404 Not Found'
    """
    if isinstance(exc, httpx.HTTPStatusError):
        resp = exc.response
        return f"failed to fetch data: {resp.status_code} {resp.reason_phrase}".rstrip()
    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    message = str(exc).strip()
    return message or type(exc).__name__


def validate_url(text: str) -> str:
    """
    Check a URL typed into the input bar.

    The value must look like a request URI (an absolute path or a URL
    with a scheme) and must carry an http or https scheme and a host.

    Parameters:
        text: Raw input text

    Returns:
        The URL with surrounding whitespace removed

    Raises:
        InvalidURLError: With the status-line message explaining the problem

    Example:
        >>> validate_url(" https://iiif.example.org/collection ")
        'https://iiif.example.org/collection'
        >>> validate_url("/collection")
        Traceback (most recent call last):
        ...
        loam_iiif.errors.InvalidURLError: URL must include http:// or https://
    """
    url = text.strip()
    if not url:
        raise InvalidURLError(EMPTY_URL_MESSAGE)
    if any(ch.isspace() or not ch.isprintable() for ch in url):
        raise InvalidURLError(INVALID_URL_MESSAGE)

    if url.startswith("/"):
        raise InvalidURLError(MISSING_SCHEME_MESSAGE)
    if not _SCHEME_RE.match(url):
        raise InvalidURLError(INVALID_URL_MESSAGE)

    try:
        parts = urlsplit(url)
    except ValueError:
        raise InvalidURLError(INVALID_URL_MESSAGE) from None

    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        raise InvalidURLError(MISSING_SCHEME_MESSAGE)
    if not parts.netloc:
        raise InvalidURLError(INVALID_URL_MESSAGE)
    return url
