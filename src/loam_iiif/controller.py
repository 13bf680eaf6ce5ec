"""
Event reducer for the terminal browser.

The :class:`Controller` owns all browsing state. ``handle`` consumes one
event (a key, the text submitted from the URL bar or the chat composer, a
resize, a spinner tick, or the completion of a background task) and
returns the commands the front end must run. ``execute`` runs a single
command with the injected services and returns the completion event,
which the front end posts back to ``handle``.

Text editing belongs to the front end's input widgets; only submitted
text reaches the controller. Keys use a small toolkit-neutral
vocabulary: ``ctrl+c``, ``esc``, ``tab``, ``enter``, ``up``, ``down``,
``pageup``, ``pagedown``, ``home``, ``end`` and single printable
characters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Union

import httpx

from loam_iiif.browser import open_url
from loam_iiif.chat import ChatOverlay, ChatRequest, ChatService, UnavailableChatService
from loam_iiif.errors import ChatServiceError, InvalidURLError
from loam_iiif.iiif import EntryKind, describe_fetch_error, fetch_bytes, validate_url
from loam_iiif.navigation import READY, FetchRequest, Focus, Navigator


LOGGER = logging.getLogger(__name__)

MIN_WIDTH = 80
MIN_HEIGHT = 24
WINDOW_TOO_SMALL = f"Window too small. Minimum size is {MIN_WIDTH}x{MIN_HEIGHT}"
OPENED_CHAT = "Opened chat panel."
CLOSED_CHAT = "Closed chat panel."

URL_LIMIT = 256
INTERRUPT = "ctrl+c"
SPINNER_FRAMES = ("|", "/", "-", "\\")

TITLE_HEIGHT = 1
INPUT_HEIGHT = 3
STATUS_HEIGHT = 3
HELP_HEIGHT = 1
SECTION_TITLES = 2  # "Status" and "Results"/"Record Detail"
PADDING = 2
MIN_LIST_HEIGHT = 3
ROWS_PER_ENTRY = 2


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class UrlSubmitted:
    text: str


@dataclass(frozen=True)
class ChatSubmitted:
    text: str


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class FetchSucceeded:
    request_id: int
    body: bytes


@dataclass(frozen=True)
class FetchFailed:
    request_id: int
    message: str


@dataclass(frozen=True)
class ChatReplied:
    request_id: int
    text: str


@dataclass(frozen=True)
class ChatFailed:
    request_id: int
    message: str


Event = Union[
    KeyPressed,
    UrlSubmitted,
    ChatSubmitted,
    Resized,
    Tick,
    FetchSucceeded,
    FetchFailed,
    ChatReplied,
    ChatFailed,
]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Quit:
    pass


Command = Union[FetchRequest, ChatRequest, Quit]


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Layout:
    """
    Row allocation for one window size.

    Sections, top to bottom: title, URL input, status, results list (takes
    the rest), chat panel when visible (about a third of the window), help.
    """

    width: int
    height: int
    content_width: int
    list_height: int
    chat_height: int
    title_height: int = TITLE_HEIGHT
    input_height: int = INPUT_HEIGHT
    status_height: int = STATUS_HEIGHT
    help_height: int = HELP_HEIGHT

    @property
    def visible_entries(self) -> int:
        # two rows per entry inside a bordered box
        return max(1, (self.list_height - 2) // ROWS_PER_ENTRY)


def compute_layout(width: int, height: int, *, chat_visible: bool) -> Layout:
    content_width = width - 2 * PADDING
    content_height = height - 2
    chat_height = height // 3 if chat_visible else 0
    fixed = TITLE_HEIGHT + INPUT_HEIGHT + STATUS_HEIGHT + HELP_HEIGHT + SECTION_TITLES
    list_height = max(MIN_LIST_HEIGHT, content_height - fixed - chat_height)
    return Layout(
        width=width,
        height=height,
        content_width=content_width,
        list_height=list_height,
        chat_height=chat_height,
    )


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class Controller:
    """
    Single owner of the browser state.

    Parameters:
        fetcher: GET function returning the response body
        chat_service: Chat backend used by the overlay
        opener: Opens a URL in the system browser, raising OSError on failure
    """

    def __init__(
        self,
        *,
        fetcher: Callable[[str], bytes] = fetch_bytes,
        chat_service: ChatService | None = None,
        opener: Callable[[str], None] = open_url,
    ) -> None:
        self.nav = Navigator()
        self.chat = ChatOverlay()
        self.layout: Layout | None = None
        self.window_too_small = False
        self.spinner_frame = 0
        self._size: tuple[int, int] | None = None

        self._fetcher = fetcher
        self._chat_service = chat_service or UnavailableChatService("no chat service configured")
        self._opener = opener

    @property
    def status(self) -> str:
        return self.nav.status

    @property
    def spinner(self) -> str:
        return SPINNER_FRAMES[self.spinner_frame]

    @property
    def url_bar_active(self) -> bool:
        """True when typed text belongs to the URL bar."""
        return not self.chat.visible and not self.nav.detail_visible and self.nav.focus is Focus.INPUT

    # --- Reducer -----------------------------------------------------------

    def handle(self, event: Event) -> list[Command]:
        """Apply ``event`` and return the commands to run."""
        if isinstance(event, KeyPressed):
            return self._handle_key(event.key)
        if isinstance(event, UrlSubmitted):
            return self.submit_url(event.text)
        if isinstance(event, ChatSubmitted):
            return self._submit_chat(event.text)
        if isinstance(event, Resized):
            self._handle_resize(event.width, event.height)
        elif isinstance(event, Tick):
            if self.nav.loading:
                self.spinner_frame = (self.spinner_frame + 1) % len(SPINNER_FRAMES)
        elif isinstance(event, FetchSucceeded):
            if self.nav.complete_fetch(event.request_id, event.body):
                self.chat.set_context(self.nav.listing)
        elif isinstance(event, FetchFailed):
            self.nav.fail_fetch(event.request_id, event.message)
        elif isinstance(event, ChatReplied):
            self.chat.receive(event.request_id, event.text)
        elif isinstance(event, ChatFailed):
            self.chat.fail(event.request_id, event.message)
        else:
            raise TypeError(f"Unsupported event: {event!r}")
        return []

    def submit_url(self, text: str) -> list[Command]:
        """Enter in the URL bar: validate ``text`` and start loading it."""
        if not self.url_bar_active:
            return []
        try:
            url = validate_url(text)
        except InvalidURLError as e:
            self.nav.status = str(e)
            return []
        request = self.nav.load(url)
        return [request] if request else []

    def _submit_chat(self, text: str) -> list[Command]:
        if not self.chat.visible:
            return []
        request = self.chat.submit(text)
        if request is None:
            return []
        LOGGER.info("Chat request issued", extra={"request_id": request.request_id})
        return [request]

    def _handle_key(self, key: str) -> list[Command]:
        if self.chat.visible:
            # the composer widget edits text; enter arrives as ChatSubmitted
            if key in ("esc", INTERRUPT):
                self.chat.close()
                self.nav.status = CLOSED_CHAT
                self._relayout()
            return []
        if self.nav.detail_visible:
            if key == INTERRUPT:
                return [Quit()]
            if key == "esc":
                self.nav.close_detail()
            return []
        if self.nav.focus is Focus.INPUT:
            return self._input_key(key)
        return self._list_key(key)

    def _input_key(self, key: str) -> list[Command]:
        if key == INTERRUPT:
            return [Quit()]
        if key == "tab":
            self.nav.focus_list()
        elif key in ("c", "C"):
            self.chat.open()
            self.nav.status = OPENED_CHAT
            self._relayout()
        return []

    def _list_key(self, key: str) -> list[Command]:
        nav = self.nav
        if key == INTERRUPT:
            return [Quit()]
        if key == "esc":
            if nav.back():
                self.chat.set_context(nav.listing)
            return []
        if key == "tab":
            nav.focus_input()
            return []
        if key in ("up", "k"):
            nav.move_selection(-1)
        elif key in ("down", "j"):
            nav.move_selection(1)
        elif key == "enter":
            entry = nav.selected
            if entry is not None and entry.kind is EntryKind.COLLECTION:
                request = nav.descend()
                return [request] if request else []
            if entry is not None and entry.kind is EntryKind.MANIFEST:
                nav.open_detail()
        elif key in ("o", "O"):
            nav.open_in_browser(self._opener)
        else:
            self._list_widget_key(key)
        return []

    def _list_widget_key(self, key: str) -> None:
        nav = self.nav
        if not nav.listing:
            return
        page = self.layout.visible_entries if self.layout else 1
        current = nav.selected_index or 0
        if key == "pageup":
            nav.select(current - page)
        elif key == "pagedown":
            nav.select(current + page)
        elif key == "home":
            nav.select(0)
        elif key == "end":
            nav.select(len(nav.listing) - 1)

    def _handle_resize(self, width: int, height: int) -> None:
        self._size = (width, height)
        if width < MIN_WIDTH or height < MIN_HEIGHT:
            self.window_too_small = True
            self.nav.status = WINDOW_TOO_SMALL
            return
        self.window_too_small = False
        if self.nav.status == WINDOW_TOO_SMALL:
            self.nav.status = READY
        self._relayout()

    def _relayout(self) -> None:
        if self._size is None or self.window_too_small:
            return
        width, height = self._size
        self.layout = compute_layout(width, height, chat_visible=self.chat.visible)

    # --- Side effects ------------------------------------------------------

    def execute(self, command: FetchRequest | ChatRequest) -> Event:
        """
        Run one command and return its completion event.

        Safe to call from a worker thread: only the injected services are
        used, no controller state is read or written beyond the command.
        """
        if isinstance(command, FetchRequest):
            try:
                body = self._fetcher(command.url)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                return FetchFailed(command.request_id, describe_fetch_error(e))
            return FetchSucceeded(command.request_id, body)

        if isinstance(command, ChatRequest):
            try:
                text = self._chat_service.send(command.prompt, command.context)
            except ChatServiceError as e:
                LOGGER.warning("Chat request failed", extra={"request_id": command.request_id, "error": str(e)})
                return ChatFailed(command.request_id, str(e))
            return ChatReplied(command.request_id, text)

        raise TypeError(f"Command cannot be executed: {command!r}")
