"""Tests for the system browser launcher."""

import subprocess

import pytest

from loam_iiif import browser
from loam_iiif.browser import browser_command, open_url


URL = "https://example.org/iiif/manifest/1"


@pytest.mark.parametrize(
    "platform, expected",
    [
        ("darwin", ["open", URL]),
        ("win32", ["rundll32", "url.dll,FileProtocolHandler", URL]),
        ("linux", ["xdg-open", URL]),
        ("freebsd13", ["xdg-open", URL]),
    ],
)
def test_browser_command(platform, expected):
    """Test the opener chosen for each platform."""
    assert browser_command(URL, platform=platform) == expected


def test_open_url_does_not_wait(monkeypatch):
    """Test that the opener is launched detached from the terminal."""
    launched = []

    def fake_popen(args, **kwargs):
        launched.append((args, kwargs))

    monkeypatch.setattr(browser.subprocess, "Popen", fake_popen)
    open_url(URL)
    args, kwargs = launched[0]
    assert args[-1] == URL
    assert kwargs["stdout"] is subprocess.DEVNULL
    assert kwargs["stdin"] is subprocess.DEVNULL


def test_open_url_missing_opener(monkeypatch):
    """Test that a missing opener surfaces as OSError."""
    def fake_popen(args, **kwargs):
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(browser.subprocess, "Popen", fake_popen)
    with pytest.raises(OSError):
        open_url(URL)
