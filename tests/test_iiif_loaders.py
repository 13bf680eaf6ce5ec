"""Tests for fetching documents and validating URLs."""

import httpx
import pytest

from loam_iiif.errors import InvalidURLError
from loam_iiif.iiif import describe_fetch_error, fetch_bytes, validate_url
from loam_iiif.iiif.loaders import (
    EMPTY_URL_MESSAGE,
    INVALID_URL_MESSAGE,
    MISSING_SCHEME_MESSAGE,
)


def make_transport(status: int = 200, body: bytes = b"{}") -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=body)

    return httpx.MockTransport(handler)


class TestFetchBytes:
    """Tests for fetch_bytes()."""

    def test_returns_body(self):
        """Test that the raw body is returned."""
        body = b'{"type": "Manifest", "id": "m"}'
        assert fetch_bytes("https://example.org/m", transport=make_transport(body=body)) == body

    def test_follows_redirects(self):
        """Test that redirects are followed."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(302, headers={"Location": "https://example.org/new"})
            return httpx.Response(200, content=b"moved")

        assert fetch_bytes("https://example.org/old", transport=httpx.MockTransport(handler)) == b"moved"

    def test_non_2xx_raises(self):
        """Test that error statuses raise HTTPStatusError."""
        with pytest.raises(httpx.HTTPStatusError):
            fetch_bytes("https://example.org/missing", transport=make_transport(status=404))

    def test_transport_error_raises(self):
        """Test that transport failures surface as httpx errors."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(httpx.HTTPError):
            fetch_bytes("https://example.org/down", transport=httpx.MockTransport(handler))


class TestDescribeFetchError:
    """Tests for describe_fetch_error()."""

    def test_status_error(self):
        """Test the status-line text for non-2xx responses."""
        with pytest.raises(httpx.HTTPStatusError) as excinfo:
            fetch_bytes("https://example.org/missing", transport=make_transport(status=404))
        assert describe_fetch_error(excinfo.value) == "failed to fetch data: 404 Not Found"

    def test_timeout(self):
        """Test the text for timeouts."""
        assert describe_fetch_error(httpx.ReadTimeout("timed out")) == "request timed out"

    def test_other_error(self):
        """Test that other errors use their message."""
        assert describe_fetch_error(httpx.ConnectError("connection refused")) == "connection refused"

    def test_blank_message(self):
        """Test that an exception without message falls back to its type name."""
        assert describe_fetch_error(httpx.ConnectError("")) == "ConnectError"


class TestValidateUrl:
    """Tests for validate_url()."""

    @pytest.mark.parametrize(
        "text",
        [
            "https://iiif.example.org/collection.json",
            "http://localhost:8080/manifest",
            "HTTPS://EXAMPLE.ORG/x",
        ],
    )
    def test_valid(self, text):
        """Test accepted URLs."""
        assert validate_url(text) == text

    def test_strips_whitespace(self):
        """Test that surrounding whitespace is removed."""
        assert validate_url("  https://example.org/c  ") == "https://example.org/c"

    def test_empty(self):
        """Test the empty input message."""
        with pytest.raises(InvalidURLError, match=EMPTY_URL_MESSAGE):
            validate_url("   ")

    @pytest.mark.parametrize("text", ["/collection.json", "/"])
    def test_missing_scheme(self, text):
        """Test absolute paths without a scheme."""
        with pytest.raises(InvalidURLError) as excinfo:
            validate_url(text)
        assert str(excinfo.value) == MISSING_SCHEME_MESSAGE

    @pytest.mark.parametrize("text", ["ftp://example.org/x", "mailto:someone@example.org"])
    def test_unsupported_scheme(self, text):
        """Test that only http and https are accepted."""
        with pytest.raises(InvalidURLError) as excinfo:
            validate_url(text)
        assert str(excinfo.value) == MISSING_SCHEME_MESSAGE

    @pytest.mark.parametrize(
        "text",
        ["example.org/collection", "collection.json", "1http://x", "https://exa mple.org", "http:"],
    )
    def test_invalid_format(self, text):
        """Test inputs that do not parse as a request URI."""
        with pytest.raises(InvalidURLError) as excinfo:
            validate_url(text)
        assert str(excinfo.value) == INVALID_URL_MESSAGE

    def test_is_value_error(self):
        """Test that InvalidURLError can be caught as ValueError."""
        with pytest.raises(ValueError):
            validate_url("nope")
