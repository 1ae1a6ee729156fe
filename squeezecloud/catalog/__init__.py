"""Catalog API access and stream URL resolution."""

from .client import CatalogClient
from .expander import CatalogPlaylistExpander
from .inflight import InflightRegistry
from .resolver import StreamResolver, select_source
from .types import PlayMethod, TrackRecord

__all__ = [
    "CatalogClient",
    "CatalogPlaylistExpander",
    "InflightRegistry",
    "PlayMethod",
    "StreamResolver",
    "TrackRecord",
    "select_source",
]
