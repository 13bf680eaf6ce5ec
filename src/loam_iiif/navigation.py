"""
Navigation state for the browser.

The navigator owns the current listing, the back stack of earlier
listings, the selection, the detail flag, focus, and the status line. It
never performs I/O itself: ``load`` and ``descend`` return a
:class:`FetchRequest` for the caller to run, and the result is fed back
through ``complete_fetch`` / ``fail_fetch``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from loam_iiif.iiif import Entry, EntryKind, parse_listing


LOGGER = logging.getLogger(__name__)

READY = "Ready"
FETCHING = "Fetching data..."
FETCHING_NESTED = "Fetching nested collection..."
ALREADY_FETCHING = "Already fetching data..."
WENT_BACK = "Went back to previous list."
NO_PREVIOUS = "No previous items to go back to."
CLOSED_DETAIL = "Closed detail pane."
OPENED_IN_BROWSER = "Opened in browser"
FAILED_TO_OPEN = "Failed to open URL"
COLLECTION_WITHOUT_URL = "Selected collection has no URL"


class Focus(str, Enum):
    INPUT = "input"
    LIST = "list"


@dataclass(frozen=True)
class FetchRequest:
    """
    A fetch the caller must perform.

    Attributes:
        request_id: Monotonically increasing id; only the latest is accepted
        url: Document to GET
        descend: True when issued by entering a child collection
    """

    request_id: int
    url: str
    descend: bool = False


@dataclass(frozen=True)
class Frame:
    """Snapshot of a listing kept on the back stack."""

    entries: tuple[Entry, ...]
    selected_index: int | None


class Navigator:
    def __init__(self) -> None:
        self.listing: list[Entry] = []
        self.back_stack: list[Frame] = []
        self.selected_index: int | None = None
        self.detail_visible = False
        self.focus = Focus.INPUT
        self.loading = False
        self.status = READY
        self._last_request_id = 0
        self._pending: FetchRequest | None = None

    # --- Selection ---------------------------------------------------------

    @property
    def selected(self) -> Entry | None:
        if self.selected_index is None or not self.listing:
            return None
        return self.listing[self.selected_index]

    def select(self, index: int) -> None:
        if not self.listing:
            self.selected_index = None
            return
        self.selected_index = max(0, min(index, len(self.listing) - 1))

    def move_selection(self, delta: int) -> None:
        if not self.listing:
            return
        current = self.selected_index if self.selected_index is not None else 0
        self.select(current + delta)
        if self.status == OPENED_IN_BROWSER:
            self.status = READY

    def focus_list(self) -> None:
        self.focus = Focus.LIST
        self.status = READY
        if self.listing:
            self.selected_index = 0

    def focus_input(self) -> None:
        self.focus = Focus.INPUT
        self.status = READY

    # --- Fetching ----------------------------------------------------------

    def load(self, url: str) -> FetchRequest | None:
        """
        Start loading ``url`` as the new listing.

        Only one fetch may be in flight. While loading, further loads are
        refused and None is returned.
        """
        return self._issue(url, status=FETCHING, descend=False)

    def _issue(self, url: str, *, status: str, descend: bool) -> FetchRequest | None:
        if self.loading:
            self.status = ALREADY_FETCHING
            return None
        self._last_request_id += 1
        request = FetchRequest(request_id=self._last_request_id, url=url, descend=descend)
        self._pending = request
        self.loading = True
        self.status = status
        LOGGER.info("Fetch issued", extra={"request_id": request.request_id, "url": url})
        return request

    def _take_pending(self, request_id: int) -> FetchRequest | None:
        pending = self._pending
        if pending is None or pending.request_id != request_id:
            LOGGER.info("Dropping stale fetch completion", extra={"request_id": request_id})
            return None
        self._pending = None
        self.loading = False
        return pending

    def complete_fetch(self, request_id: int, body: bytes) -> bool:
        """
        Install the listing parsed from ``body``.

        Returns False (and changes nothing) when ``request_id`` is not the
        in-flight request.
        """
        if self._take_pending(request_id) is None:
            return False
        self._install(parse_listing(body), 0)
        self.status = f"Fetched {len(self.listing)} items"
        LOGGER.info("Fetch completed", extra={"request_id": request_id, "entries": len(self.listing)})
        return True

    def fail_fetch(self, request_id: int, message: str) -> bool:
        """
        Record a failed fetch. The listing and the back stack are left
        untouched; after a failed descent, Esc returns to the same listing.
        """
        pending = self._take_pending(request_id)
        if pending is None:
            return False
        self.status = f"Error: {message}"
        LOGGER.warning(
            "Fetch failed",
            extra={"request_id": request_id, "descend": pending.descend, "error": message},
        )
        return True

    def _install(self, entries: list[Entry] | tuple[Entry, ...], selected_index: int | None) -> None:
        self.listing = list(entries)
        self.detail_visible = False
        if self.listing:
            self.select(selected_index or 0)
        else:
            self.selected_index = None

    # --- Navigation --------------------------------------------------------

    def descend(self) -> FetchRequest | None:
        """
        Enter the selected child collection.

        The current listing is pushed onto the back stack before the fetch
        is issued.
        """
        entry = self.selected
        if self.focus is not Focus.LIST or entry is None or entry.kind is not EntryKind.COLLECTION:
            return None
        if not entry.url:
            self.status = COLLECTION_WITHOUT_URL
            return None
        if self.loading:
            self.status = ALREADY_FETCHING
            return None
        self.back_stack.append(Frame(entries=tuple(self.listing), selected_index=self.selected_index))
        return self._issue(entry.url, status=FETCHING_NESTED, descend=True)

    def back(self) -> bool:
        """Restore the previous listing, if any."""
        if self.loading:
            self.status = ALREADY_FETCHING
            return False
        if not self.back_stack:
            self.status = NO_PREVIOUS
            return False
        frame = self.back_stack.pop()
        self._install(frame.entries, frame.selected_index)
        self.status = WENT_BACK
        return True

    def open_detail(self) -> bool:
        entry = self.selected
        if self.focus is not Focus.LIST or entry is None or entry.kind is not EntryKind.MANIFEST:
            return False
        self.detail_visible = True
        self.status = f"Viewing detail: {entry.title}"
        return True

    def close_detail(self) -> None:
        self.detail_visible = False
        self.status = CLOSED_DETAIL

    def open_in_browser(self, opener: Callable[[str], None]) -> bool:
        """
        Hand the selected entry's URL to ``opener``.

        ``opener`` signals failure by raising OSError.
        """
        entry = self.selected
        if entry is None or entry.is_error:
            return False
        if not entry.url:
            self.status = FAILED_TO_OPEN
            return False
        try:
            opener(entry.url)
        except OSError as e:
            LOGGER.warning("Failed to open URL", extra={"url": entry.url, "error": str(e)})
            self.status = FAILED_TO_OPEN
            return False
        self.status = OPENED_IN_BROWSER
        return True
