"""
Stream URL resolution.

The catalog's stream and download references are not playable. Requesting
one answers with a redirect to a short-lived, pre-signed CDN URL. The
resolver captures that redirect target without following it so the player
can open the CDN URL itself.
"""

import asyncio
import logging

import aiohttp

from squeezecloud.errors import StreamResolutionFailed, TransportFailure
from squeezecloud.http import HTTP_TIMEOUT_SECONDS, auth_headers

from .types import PlayMethod, TrackRecord

logger = logging.getLogger(__name__)

# Maximum number of body characters kept in a resolution error
BODY_EXCERPT_LENGTH = 200


def select_source(record: TrackRecord, mode: PlayMethod) -> str:
    """
    Pick the source reference to resolve.

    The download reference is used only when download mode is selected, the
    record has a non-empty download URL and the owner enabled downloads.
    Anything else falls back to the stream reference.
    """
    if mode == PlayMethod.DOWNLOAD and record.download_url and record.downloadable:
        return record.download_url
    return record.stream_url


class StreamResolver:
    """Resolves a track's source reference to its CDN media URL."""

    def __init__(self, session: aiohttp.ClientSession, timeout: float = HTTP_TIMEOUT_SECONDS):
        """
        Initialize resolver.

        Args:
            session: Shared HTTP session (owned by the caller)
            timeout: Total timeout for the redirect probe in seconds
        """
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def resolve_stream_url(
        self, record: TrackRecord, mode: PlayMethod, api_key: str
    ) -> str:
        """
        Capture the redirect target of the record's source reference.

        Args:
            record: Track fetched from the catalog
            mode: Configured play method
            api_key: OAuth token sent in the Authorization header

        Returns:
            CDN URL from the Location header

        Raises:
            StreamResolutionFailed: Response carried no Location header
            TransportFailure: Connection, TLS or timeout error
        """
        source = select_source(record, mode)
        logger.debug(f"Probing {mode.value} source for track {record.id}: {source}")

        if not source:
            raise StreamResolutionFailed(f"Track {record.id} has no {mode.value} source")

        try:
            async with self._session.get(
                source,
                headers=auth_headers(api_key),
                allow_redirects=False,
                timeout=self._timeout,
            ) as resp:
                location = resp.headers.get("Location")
                if location:
                    # Release without reading the redirect body
                    resp.release()
                    logger.debug(f"Redirecting stream to {location}")
                    return location

                body = await self._read_excerpt(resp)
                status_line = f"{resp.status} {resp.reason or ''}".strip()
        except aiohttp.ClientError as e:
            logger.error(f"Stream probe failed for track {record.id}: {e}")
            raise TransportFailure(str(e) or type(e).__name__) from e
        except asyncio.TimeoutError as e:
            logger.error(f"Stream probe timed out for track {record.id}")
            raise TransportFailure("Timed out resolving stream") from e

        logger.error(f"Failed to get redirect location from {source}")
        logger.debug(status_line)
        detail = f"{status_line}: {body}" if body else status_line
        raise StreamResolutionFailed(detail, status=resp.status, body=body)

    @staticmethod
    async def _read_excerpt(resp: aiohttp.ClientResponse) -> str:
        """Read at most BODY_EXCERPT_LENGTH characters of the response body."""
        raw = await resp.content.read(BODY_EXCERPT_LENGTH * 4)
        return raw.decode("utf-8", errors="replace")[:BODY_EXCERPT_LENGTH]
