"""
Textual front end for the browser.

The app holds no browsing state of its own. Keys, submitted text, resizes
and timer ticks are turned into controller events; commands returned by
the controller run on thread workers and their completion events are
posted back onto the app's message loop. Text entry is left to Textual's
``Input`` widgets, and the results are shown in an ``OptionList`` whose
highlight follows the controller's selection.
"""

from __future__ import annotations

import logging
from functools import partial

from rich.text import Text
from textual import events, on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import Input, OptionList, Static
from textual.widgets.option_list import Option

from loam_iiif.chat import COMPOSER_LIMIT, ChatRequest
from loam_iiif.controller import (
    URL_LIMIT,
    ChatSubmitted,
    Command,
    Controller,
    Event,
    KeyPressed,
    Layout,
    Quit,
    Resized,
    Tick,
    UrlSubmitted,
)
from loam_iiif.iiif import Entry
from loam_iiif.navigation import FetchRequest, Focus


LOGGER = logging.getLogger(__name__)

APP_TITLE = "LoamIIIF"
HELP_TEXT = (
    "Tab: Switch Focus | Enter: Open Detail | O: Open URL in browser | "
    "Esc: Close Detail/Back | c: Toggle Chat"
)
EMPTY_LISTING = "No items."
WAITING = "Waiting for reply..."
TICK_SECONDS = 0.1

_KEY_NAMES = {
    "escape": "esc",
    "tab": "tab",
    "enter": "enter",
    "up": "up",
    "down": "down",
    "pageup": "pageup",
    "pagedown": "pagedown",
    "home": "home",
    "end": "end",
    "ctrl+c": "ctrl+c",
}


def translate_key(key: str, character: str | None) -> str | None:
    """
    Map a Textual key to the controller's key vocabulary.

    Returns None for keys the controller has no use for.
    """
    if key in _KEY_NAMES:
        return _KEY_NAMES[key]
    if character and len(character) == 1 and character.isprintable():
        return character
    return None


def entry_prompt(entry: Entry) -> Text:
    """Two-line option for a listing entry: kind and title, then the URL."""
    text = Text(no_wrap=True, overflow="ellipsis")
    text.append(f"[{entry.kind.value}] ", style="bold")
    text.append(entry.title, style="magenta")
    text.append("\n")
    text.append(entry.url, style="grey50")
    return text


def render_detail(entry: Entry | None) -> Text:
    if entry is None:
        return Text("")
    return Text(f"Title: {entry.title}\nURL:   {entry.url}\nKind:  {entry.kind.value}")


def transcript_text(lines: list[str], rows: int, *, waiting: bool) -> Text:
    """Last ``rows`` transcript lines, plus a waiting marker while a reply is due."""
    flat: list[str] = []
    for line in lines:
        flat.extend(line.splitlines() or [""])
    if waiting:
        flat.append(WAITING)
    return Text("\n".join(flat[-rows:]))


class UrlInput(Input):
    """URL bar. The letter c opens the chat panel instead of being typed."""

    class ChatToggled(Message):
        pass

    def on_key(self, event: events.Key) -> None:
        if event.character in ("c", "C"):
            # keeps Input from inserting the character
            event.prevent_default()
            event.stop()
            self.post_message(self.ChatToggled())


class ResultsList(OptionList):
    """Listing display. Keys go to the controller, which moves the highlight."""

    can_focus = False


class LoamApp(App, inherit_bindings=False):
    """Full-screen IIIF browser."""

    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        padding: 1 2;
    }
    #title {
        height: 1;
        text-style: bold;
        color: magenta;
    }
    #title.focused {
        color: $accent;
    }
    #url-input, #composer {
        border: round grey;
        height: 3;
    }
    #url-input:focus, #composer:focus {
        border: round $accent;
    }
    #status, #results, #detail {
        border: round grey;
        padding: 0 1;
    }
    #status {
        height: 3;
    }
    #results.focused {
        border: round $accent;
    }
    #chat {
        border: round $accent;
        padding: 0 1;
    }
    #chat-log {
        height: 1fr;
    }
    .section-title {
        height: 1;
        color: grey;
    }
    #help {
        height: 1;
        color: grey;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "press('ctrl+c')", show=False, priority=True),
        Binding("tab", "press('tab')", show=False, priority=True),
        Binding("escape", "press('esc')", show=False, priority=True),
    ]

    def __init__(self, controller: Controller, *, initial_url: str | None = None) -> None:
        super().__init__()
        self.controller = controller
        self._initial_url = initial_url
        self._shown_listing: list[Entry] | None = None
        self._mounted = False

    def compose(self) -> ComposeResult:
        yield Static(APP_TITLE, id="title")
        yield UrlInput(placeholder="Enter IIIF URL...", max_length=URL_LIMIT, id="url-input")
        yield Static("Status", classes="section-title")
        yield Static(id="status")
        yield Static(id="main-title", classes="section-title")
        yield ResultsList(id="results")
        yield Static(id="detail")
        yield Static("Chat Panel", id="chat-title", classes="section-title")
        with Vertical(id="chat"):
            yield Static(id="chat-log")
            yield Input(placeholder="Send a message...", max_length=COMPOSER_LIMIT, id="composer")
        yield Static(HELP_TEXT, id="help")

    def on_mount(self) -> None:
        self._mounted = True
        self.set_interval(TICK_SECONDS, self._tick)
        if self._initial_url:
            self.query_one("#url-input", Input).value = self._initial_url
            self._run(self.controller.submit_url(self._initial_url))
        self.refresh_view()

    # --- Input -------------------------------------------------------------

    def on_key(self, event: events.Key) -> None:
        if isinstance(self.focused, Input):
            # editing keys and enter belong to the focused input
            return
        key = translate_key(event.key, event.character)
        if key is None:
            return
        event.stop()
        event.prevent_default()
        self.apply_event(KeyPressed(key))

    @on(UrlInput.ChatToggled)
    def on_chat_toggled(self, event: UrlInput.ChatToggled) -> None:
        self.apply_event(KeyPressed("c"))

    @on(Input.Submitted, "#url-input")
    def on_url_submitted(self, event: Input.Submitted) -> None:
        self.apply_event(UrlSubmitted(event.value))

    @on(Input.Submitted, "#composer")
    def on_composer_submitted(self, event: Input.Submitted) -> None:
        event.input.value = ""
        self.apply_event(ChatSubmitted(event.value))

    def on_resize(self, event: events.Resize) -> None:
        self.apply_event(Resized(event.size.width, event.size.height))

    def action_press(self, key: str) -> None:
        self.apply_event(KeyPressed(key))

    def _tick(self) -> None:
        if self.controller.nav.loading:
            self.apply_event(Tick())

    # --- Event loop --------------------------------------------------------

    def apply_event(self, event: Event) -> None:
        self._run(self.controller.handle(event))
        if self._mounted:
            self.refresh_view()

    def _run(self, commands: list[Command]) -> None:
        for command in commands:
            if isinstance(command, Quit):
                self.exit()
                return
            LOGGER.debug(
                "Scheduling command",
                extra={"command": type(command).__name__, "request_id": command.request_id},
            )
            self.run_worker(
                partial(self._execute, command),
                name=type(command).__name__,
                group="io",
                thread=True,
            )

    def _execute(self, command: FetchRequest | ChatRequest) -> None:
        # runs on a worker thread
        event = self.controller.execute(command)
        self.call_from_thread(self.apply_event, event)

    # --- Rendering ---------------------------------------------------------

    def refresh_view(self) -> None:
        controller = self.controller
        nav = controller.nav
        layout = controller.layout

        self.query_one("#title", Static).set_class(controller.url_bar_active, "focused")

        status = controller.status
        if nav.loading:
            status = f"{controller.spinner} {status}"
        self.query_one("#status", Static).update(Text(status, no_wrap=True, overflow="ellipsis"))

        results = self.query_one("#results", ResultsList)
        detail = self.query_one("#detail", Static)
        results.display = not nav.detail_visible
        detail.display = nav.detail_visible
        if layout is not None:
            results.styles.height = layout.list_height
            detail.styles.height = layout.list_height
        if nav.detail_visible:
            self.query_one("#main-title", Static).update("Record Detail")
            detail.update(render_detail(nav.selected))
        else:
            self.query_one("#main-title", Static).update("Results")
        results.set_class(nav.focus is Focus.LIST and not nav.detail_visible, "focused")
        self._sync_results(results)

        self._render_chat(layout)
        self._sync_focus()

    def _sync_results(self, results: ResultsList) -> None:
        nav = self.controller.nav
        if self._shown_listing is not nav.listing:
            self._shown_listing = nav.listing
            results.clear_options()
            if nav.listing:
                results.add_options([Option(entry_prompt(entry)) for entry in nav.listing])
            else:
                results.add_option(Option(EMPTY_LISTING, disabled=True))
        if nav.listing and nav.selected_index is not None:
            results.highlighted = nav.selected_index
        else:
            results.highlighted = None

    def _render_chat(self, layout: Layout | None) -> None:
        chat = self.controller.chat
        self.query_one("#chat-title", Static).display = chat.visible
        panel = self.query_one("#chat", Vertical)
        panel.display = chat.visible
        if not chat.visible:
            return

        height = layout.chat_height if layout and layout.chat_height else 10
        panel.styles.height = height
        # panel border two rows, composer three
        rows = max(1, height - 5)
        self.query_one("#chat-log", Static).update(
            transcript_text(chat.render_lines(), rows, waiting=chat.waiting)
        )

    def _sync_focus(self) -> None:
        controller = self.controller
        if controller.chat.visible:
            target = self.query_one("#composer", Input)
        elif controller.url_bar_active:
            target = self.query_one("#url-input", Input)
        else:
            target = None
        if self.focused is not target:
            self.set_focus(target)
