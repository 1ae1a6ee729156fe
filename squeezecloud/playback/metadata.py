"""
Track metadata projection.

Turns a catalog TrackRecord into the display-ready TrackMetadata that is
cached and shown by the player.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Optional, Union

from squeezecloud.catalog.types import TrackRecord

logger = logging.getLogger(__name__)

URI_SCHEME = "soundcloud"
ALBUM_LABEL = "SoundCloud"
NOMINAL_BITRATE = "128kbps"


def track_uri(track_id: str) -> str:
    """Internal replay URI for a track."""
    return f"{URI_SCHEME}://{track_id}"


def better_artwork_url(artwork_url: Optional[str]) -> str:
    """Request the 500x500 artwork variant instead of the default size."""
    return (artwork_url or "").replace("-large", "-t500x500")


def _positive_int(value: Any) -> int:
    """Parse a loosely typed catalog number; 0 when absent or invalid."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            number = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
    return number if number > 0 else 0


def derive_year(release_year: Any, created_at: Any) -> str:
    """
    Four-digit release year.

    Precedence: explicit release year when positive, then the first four
    characters of the creation timestamp when they are digits, else "".
    """
    year = _positive_int(release_year)
    if year:
        return str(year)

    prefix = str(created_at or "")[:4]
    if len(prefix) == 4 and prefix.isdigit():
        return prefix
    return ""


def sanitize_bpm(value: Any) -> Union[int, str]:
    """Tempo as a positive int, or "" when absent."""
    bpm = _positive_int(value)
    return bpm if bpm else ""


@dataclass(frozen=True)
class TrackMetadata:
    """
    Cached, display-ready track metadata.

    ``year`` and ``bpm`` are "" rather than None when unknown so the field
    types stay stable for consumers.
    """

    id: str
    duration: int = 0  # Whole seconds, truncated
    name: str = ""
    title: str = ""
    artist: str = ""
    album: str = ALBUM_LABEL
    play: str = ""
    bitrate: str = NOMINAL_BITRATE
    bpm: Union[int, str] = ""
    type: str = "audio"
    icon: str = ""
    image: str = ""
    cover: str = ""
    year: str = ""
    on_select: str = "play"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for caching and JSON output."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackMetadata":
        """Rebuild from a dictionary produced by ``to_dict``."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


def make_metadata(record: TrackRecord) -> TrackMetadata:
    """Project a catalog record into TrackMetadata."""
    icon = better_artwork_url(record.artwork_url)
    metadata = TrackMetadata(
        id=record.id,
        duration=record.duration_ms // 1000,
        name=record.title,
        title=record.title,
        artist=record.username,
        play=track_uri(record.id),
        bpm=sanitize_bpm(record.bpm),
        icon=icon,
        image=icon,
        cover=icon,
        year=derive_year(record.release_year, record.created_at),
    )
    logger.debug(f"Built metadata for track {record.id}: {metadata.artist} - {metadata.title}")
    return metadata
