"""
Inbound play reference parsing.
"""

import re
from typing import Optional

from .metadata import URI_SCHEME

TRACK_URI_PREFIX = f"{URI_SCHEME}://"

# Public SoundCloud pages that expand into a list of tracks
PAGE_URL_REGEXP = re.compile(r"^https?://(www\.|m\.)?soundcloud\.com/", re.IGNORECASE)


def parse_track_uri(uri: str) -> Optional[str]:
    """
    Extract the track ID from a ``soundcloud://<id>`` reference.

    Uses an exact prefix match; returns None for anything else or an
    empty ID.
    """
    if not uri or not uri.startswith(TRACK_URI_PREFIX):
        return None
    track_id = uri[len(TRACK_URI_PREFIX):]
    return track_id or None


def is_page_url(uri: str) -> bool:
    """Check if a URI points at a SoundCloud web page."""
    return bool(PAGE_URL_REGEXP.match(uri or ""))
