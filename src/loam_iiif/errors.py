"""Exception types shared across loam_iiif."""

from __future__ import annotations


class LoamError(Exception):
    """Base class for errors raised by loam_iiif."""


class InvalidURLError(LoamError, ValueError):
    """URL typed by the user cannot be fetched. The message is user-facing."""


class ChatServiceError(LoamError):
    """The chat service could not produce a reply."""
