"""
Pydantic models for IIIF Presentation API resources (v2 and v3).

These models accept both wire dialects: v2 documents use "@id"/"@type"
and plain string labels, v3 documents use "id"/"type" and language maps.
Decoding is deliberately tolerant. Missing or malformed fields become
empty strings (or "Untitled" for labels) instead of validation errors, so
that a single odd child never hides the rest of a collection.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


UNTITLED = "Untitled"

_FLAT_MAP_KEYS = ("en", "none", "@value")


class EntryKind(str, Enum):
    """Kind of a row shown in the results list."""

    COLLECTION = "Collection"
    MANIFEST = "Manifest"
    ERROR = "Error"


class ResourceKind(str, Enum):
    """Classification of a decoded IIIF resource."""

    COLLECTION = "Collection"
    MANIFEST = "Manifest"
    OTHER = "Other"


@dataclass(frozen=True)
class Entry:
    """
    One browsable row of a listing.

    Attributes:
        url: Resource id (may be empty when the source omits it)
        title: Best-effort display label
        kind: Collection, Manifest, or Error (a sentinel for failures)
    """

    url: str
    title: str
    kind: EntryKind

    @property
    def is_error(self) -> bool:
        return self.kind is EntryKind.ERROR


def error_entry(message: str) -> Entry:
    """Build the sentinel entry used to surface a failure inside the list."""
    return Entry(url="", title=message, kind=EntryKind.ERROR)


def _first_string(values: Any) -> str | None:
    """Return the first element of a non-empty list made only of strings."""
    if isinstance(values, list) and values and all(isinstance(v, str) for v in values):
        return values[0]
    return None


def decode_label(value: Any) -> str:
    """
    Normalize a IIIF ``label`` value to a single display string.

    Accepted shapes, tried in order (first match wins):

    1. ``{"none": ["..."]}`` language map, the "none" key
    2. ``{"en": ["..."]}`` language map, the "en" key
    3. ``{"@value": "..."}`` v2 value object
    4. flat ``{lang: "..."}`` map: "en", "none", "@value", then first value
    5. a bare string

    Anything else (including empty strings) yields "Untitled". This function
    never raises.

    Parameters:
        value: Raw JSON value of the label field (may be None)

    Returns:
        Display string, never empty

    Example:
        >>> decode_label({"en": ["Book of Hours"]})
        'Book of Hours'
        >>> decode_label(None)
        'Untitled'
    """
    text: str | None = None

    if isinstance(value, dict):
        text = _first_string(value.get("none"))
        if text is None:
            text = _first_string(value.get("en"))
        if text is None and isinstance(value.get("@value"), str):
            text = value["@value"]
        if text is None and value and all(isinstance(v, str) for v in value.values()):
            for key in _FLAT_MAP_KEYS:
                if key in value:
                    text = value[key]
                    break
            else:
                # dicts keep insertion order, so this is stable per document
                text = next(iter(value.values()))
    elif isinstance(value, str):
        text = value

    return text if text else UNTITLED


def is_collection_type(type_: str) -> bool:
    """
    Check whether a ``type``/``@type`` string names a Collection.

    Matches "Collection", "sc:Collection", and anything starting with
    "collection", ignoring case.
    """
    t = type_.lower()
    return t in ("collection", "sc:collection") or t.startswith("collection")


def is_manifest_type(type_: str) -> bool:
    """
    Check whether a ``type``/``@type`` string names a Manifest.

    Matches "Manifest", "sc:Manifest", and anything starting with
    "manifest", ignoring case.
    """
    t = type_.lower()
    return t in ("manifest", "sc:manifest") or t.startswith("manifest")


def classify(type_: str) -> ResourceKind:
    if is_collection_type(type_):
        return ResourceKind.COLLECTION
    if is_manifest_type(type_):
        return ResourceKind.MANIFEST
    return ResourceKind.OTHER


def _pick_string(data: dict[str, Any], *keys: str) -> str:
    """Return the first non-empty string among ``keys``, else ""."""
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


class Resource(BaseModel):
    """
    Identity of a IIIF resource, decoded from either v2 or v3 JSON.

    ``id`` is taken from "id" when present, else "@id"; ``type`` from
    "type", else "@type". The label is already flattened to text.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    type: str = ""
    label: str = UNTITLED

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        normalized = dict(data)
        normalized["id"] = _pick_string(data, "id", "@id")
        normalized["type"] = _pick_string(data, "type", "@type")
        normalized["label"] = decode_label(data.get("label"))
        return normalized

    @property
    def kind(self) -> ResourceKind:
        return classify(self.type)

    def to_entry(self, kind: EntryKind) -> Entry:
        return Entry(url=self.id, title=self.label, kind=kind)


class CollectionDocument(Resource):
    """
    Top-level document that may list children.

    ``items`` is the v3 child list (Manifests and nested Collections);
    ``manifests`` is the v2 list, whose members are always Manifests.
    Non-list values are treated as empty lists.
    """

    items: list[Resource] = Field(default_factory=list)
    manifests: list[Resource] = Field(default_factory=list)

    @field_validator("items", "manifests", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []
