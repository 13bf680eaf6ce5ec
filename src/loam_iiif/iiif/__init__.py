"""
IIIF Presentation API (v2 and v3) decoding and loading.

This package turns a fetched Collection or Manifest document into a flat,
ordered listing of entries that the browser can display.

Basic usage:
    >>> from loam_iiif.iiif import fetch_bytes, parse_listing
    >>>
    >>> entries = parse_listing(fetch_bytes("https://example.org/collection.json"))
    >>> for entry in entries:
    ...     print(entry.kind.value, entry.title, entry.url)

Decoding a label on its own:
    >>> from loam_iiif.iiif import decode_label
    >>> decode_label({"none": ["Letters, 1890"]})
    'Letters, 1890'
"""

from .models import (
    UNTITLED,
    Entry,
    EntryKind,
    Resource,
    ResourceKind,
    CollectionDocument,
    classify,
    decode_label,
    error_entry,
    is_collection_type,
    is_manifest_type,
)
from .parser import (
    NO_ENTRIES_MESSAGE,
    PARSE_ERROR_PREFIX,
    build_context,
    extract_listing,
    parse_listing,
)
from .loaders import (
    DEFAULT_TIMEOUT,
    describe_fetch_error,
    fetch_bytes,
    validate_url,
)

__all__ = [
    # Models
    "UNTITLED",
    "Entry",
    "EntryKind",
    "Resource",
    "ResourceKind",
    "CollectionDocument",
    "classify",
    "decode_label",
    "error_entry",
    "is_collection_type",
    "is_manifest_type",
    # Parsing
    "NO_ENTRIES_MESSAGE",
    "PARSE_ERROR_PREFIX",
    "build_context",
    "extract_listing",
    "parse_listing",
    # Loading
    "DEFAULT_TIMEOUT",
    "describe_fetch_error",
    "fetch_bytes",
    "validate_url",
]
