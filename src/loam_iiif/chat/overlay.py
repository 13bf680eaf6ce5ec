"""
Chat overlay state.

The overlay keeps a transcript of the conversation and a plain-text
snapshot of the listing currently on screen. The composer text lives in
the front end's input widget. Sending a message returns a
:class:`ChatRequest` for the caller to run; the reply comes back through
``receive`` or ``fail``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from loam_iiif.iiif import Entry, build_context


LOGGER = logging.getLogger(__name__)

COMPOSER_LIMIT = 280
WELCOME = "Welcome to LoamIIIF Chat!\nPress 'esc' to close the chat panel."


@dataclass(frozen=True)
class ChatRequest:
    request_id: int
    prompt: str
    context: str


class ChatOverlay:
    def __init__(self) -> None:
        self.visible = False
        self.transcript: list[str] = []
        self.error: str | None = None
        self.context = ""
        self._last_request_id = 0
        self._pending: set[int] = set()

    @property
    def waiting(self) -> bool:
        return bool(self._pending)

    def open(self) -> None:
        self.visible = True

    def close(self) -> None:
        self.visible = False

    def set_context(self, entries: Iterable[Entry]) -> None:
        self.context = build_context(entries)

    def submit(self, text: str) -> ChatRequest | None:
        """
        Send a composer message. Blank input is ignored.

        The user's line is added to the transcript right away.
        """
        text = text.strip()
        if not text:
            return None
        self.transcript.append(f"You: {text}")
        self._last_request_id += 1
        self._pending.add(self._last_request_id)
        return ChatRequest(request_id=self._last_request_id, prompt=text, context=self.context)

    def receive(self, request_id: int, text: str) -> bool:
        if not self._settle(request_id):
            return False
        reply = text.strip()
        if reply:
            self.transcript.append(f"Assistant: {reply}")
        self.error = None
        return True

    def fail(self, request_id: int, message: str) -> bool:
        if not self._settle(request_id):
            return False
        self.error = message
        self.transcript.append(f"Error: {message}")
        return True

    def _settle(self, request_id: int) -> bool:
        if request_id not in self._pending:
            LOGGER.info("Dropping unknown chat completion", extra={"request_id": request_id})
            return False
        self._pending.discard(request_id)
        return True

    def render_lines(self) -> list[str]:
        return self.transcript if self.transcript else WELCOME.splitlines()
