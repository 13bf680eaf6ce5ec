"""Opening URLs in the system browser."""

from __future__ import annotations

import subprocess
import sys


def browser_command(url: str, platform: str | None = None) -> list[str]:
    """
    Command line that opens ``url`` on the given platform.

    Example:
        >>> browser_command("https://example.org", platform="darwin")
        ['open', 'https://example.org']
    """
    platform = platform or sys.platform
    if platform == "darwin":
        return ["open", url]
    if platform.startswith("win"):
        return ["rundll32", "url.dll,FileProtocolHandler", url]
    return ["xdg-open", url]


def open_url(url: str) -> None:
    """
    Launch the platform opener for ``url`` without waiting for it.

    Raises:
        OSError: If the opener cannot be started
    """
    kwargs = {}
    if sys.platform != "win32":
        kwargs["start_new_session"] = True
    subprocess.Popen(
        browser_command(url),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        **kwargs,
    )
