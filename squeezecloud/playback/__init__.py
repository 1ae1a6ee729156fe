"""Track resolution pipeline and metadata caching."""

from .cache import (
    META_CACHE_TTL,
    MetadataCache,
    track_key,
)
from .metadata import (
    TrackMetadata,
    better_artwork_url,
    derive_year,
    make_metadata,
    sanitize_bpm,
)
from .pipeline import (
    ErrorCallback,
    ResolutionState,
    ResolvedStream,
    SuccessCallback,
    TrackResolution,
    TrackResolver,
)
from .playlist import PlaylistExpander
from .uri import is_page_url, parse_track_uri

__all__ = [
    # Cache
    "META_CACHE_TTL",
    "MetadataCache",
    "track_key",
    # Metadata
    "TrackMetadata",
    "better_artwork_url",
    "derive_year",
    "make_metadata",
    "sanitize_bpm",
    # Pipeline
    "ErrorCallback",
    "ResolutionState",
    "ResolvedStream",
    "SuccessCallback",
    "TrackResolution",
    "TrackResolver",
    # References
    "PlaylistExpander",
    "is_page_url",
    "parse_track_uri",
]
