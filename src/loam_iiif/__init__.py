"""LoamIIIF: a terminal browser for IIIF collections and manifests."""

__version__ = "0.1.0"
