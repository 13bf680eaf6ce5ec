"""
Turning fetched IIIF documents into flat listings.

The extractor is non-recursive: child Collections are listed, not
followed. Descending into them is a user action handled by the
navigation layer.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from .models import (
    CollectionDocument,
    Entry,
    EntryKind,
    ResourceKind,
    error_entry,
)


LOGGER = logging.getLogger(__name__)

NO_ENTRIES_MESSAGE = "No valid manifests or child collections found"
PARSE_ERROR_PREFIX = "Failed to parse IIIF data: "


def extract_listing(data: dict[str, Any]) -> list[Entry]:
    """
    Build the listing for an already-decoded JSON document.

    For a Collection root, ``items`` children classified as Manifest or
    Collection are emitted in document order, followed by every member of
    ``manifests`` (always as Manifests). A Manifest root yields itself.
    Any other root yields nothing. An empty result is replaced by a single
    Error entry.

    Parameters:
        data: Root JSON object

    Returns:
        Ordered list of entries, never empty

    Example:
        >>> extract_listing({"type": "Manifest", "id": "m", "label": "Only"})
        [Entry(url='m', title='Only', kind=<EntryKind.MANIFEST: 'Manifest'>)]
    """
    root = CollectionDocument.model_validate(data)
    entries: list[Entry] = []

    if root.kind is ResourceKind.COLLECTION:
        for index, item in enumerate(root.items):
            kind = item.kind
            if kind is ResourceKind.MANIFEST:
                entries.append(item.to_entry(EntryKind.MANIFEST))
            elif kind is ResourceKind.COLLECTION:
                entries.append(item.to_entry(EntryKind.COLLECTION))
            else:
                LOGGER.debug(
                    "Skipping items[%d] with unrecognized type",
                    index,
                    extra={"item_id": item.id, "item_type": item.type},
                )
        for manifest in root.manifests:
            entries.append(manifest.to_entry(EntryKind.MANIFEST))
    elif root.kind is ResourceKind.MANIFEST:
        entries.append(root.to_entry(EntryKind.MANIFEST))
    else:
        LOGGER.debug("Root is neither Collection nor Manifest", extra={"root_type": root.type})

    if not entries:
        return [error_entry(NO_ENTRIES_MESSAGE)]
    return entries


def parse_listing(body: bytes | str) -> list[Entry]:
    """
    Decode raw response bytes and extract the listing.

    JSON syntax errors, undecodable bytes and non-object roots never raise;
    they become a single Error entry whose title starts with
    "Failed to parse IIIF data:".

    Parameters:
        body: Raw document as returned by the HTTP layer

    Returns:
        Ordered list of entries, never empty
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        LOGGER.warning("Failed to decode IIIF document", extra={"error": str(e)})
        return [error_entry(PARSE_ERROR_PREFIX + str(e))]

    if not isinstance(data, dict):
        message = f"expected a JSON object at the root, got {type(data).__name__}"
        return [error_entry(PARSE_ERROR_PREFIX + message)]

    return extract_listing(data)


def build_context(entries: Iterable[Entry]) -> str:
    """
    Render a listing as plain text for the chat service.

    Each entry contributes ``Title: <title>\\nURL: <url>\\n\\n``.
    """
    return "".join(f"Title: {e.title}\nURL: {e.url}\n\n" for e in entries)
