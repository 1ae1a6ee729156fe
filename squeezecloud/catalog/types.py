"""
Catalog data types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class PlayMethod(str, Enum):
    """Which catalog source reference to play."""

    STREAM = "stream"
    DOWNLOAD = "download"

    @classmethod
    def parse(cls, value: Any) -> "PlayMethod":
        """Parse a preference value, falling back to STREAM."""
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.STREAM


def _as_flag(value: Any) -> bool:
    """Interpret the catalog's downloadable flag."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true")


@dataclass
class TrackRecord:
    """
    Raw catalog description of a track.

    Built from one catalog JSON response and discarded after the
    metadata projection; never cached.
    """

    id: str
    title: str = ""
    duration_ms: int = 0
    username: str = ""
    artwork_url: str = ""
    created_at: str = ""
    release_year: Any = None  # Raw value, validated during projection
    bpm: Any = None  # Raw value, validated during projection
    stream_url: str = ""
    download_url: Optional[str] = None
    downloadable: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "TrackRecord":
        """Build a record from a catalog track object."""
        user = data.get("user")
        username = user.get("username", "") if isinstance(user, dict) else ""

        try:
            duration_ms = int(data.get("duration") or 0)
        except (TypeError, ValueError):
            duration_ms = 0

        return cls(
            id=str(data["id"]) if data.get("id") is not None else "",
            title=data.get("title") or "",
            duration_ms=duration_ms,
            username=username or "",
            artwork_url=data.get("artwork_url") or "",
            created_at=data.get("created_at") or "",
            release_year=data.get("release_year"),
            bpm=data.get("bpm"),
            stream_url=data.get("stream_url") or "",
            download_url=data.get("download_url"),
            downloadable=_as_flag(data.get("downloadable", False)),
        )

    @property
    def duration_s(self) -> float:
        """Duration in seconds, unrounded."""
        return self.duration_ms / 1000.0
