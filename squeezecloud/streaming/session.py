"""
Streaming session adapter.

Opens the resolved CDN URL as a long-lived HTTP byte stream for the player
runtime. Transport errors are reported to the playback controller as a
per-track failure so the player can skip ahead instead of stalling.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Optional, Protocol

import aiohttp

from squeezecloud.errors import ErrorKind
from squeezecloud.http import HTTP_TIMEOUT_SECONDS
from squeezecloud.playback.metadata import TrackMetadata
from squeezecloud.playback.pipeline import ResolvedStream

logger = logging.getLogger(__name__)

STREAM_CHUNK_SIZE = 64 * 1024  # 64KB chunks


class PlaybackController(Protocol):
    """Host-side controller notified when a direct stream breaks."""

    def player_streaming_failed(self, error_key: str) -> None:
        """Mark the current track failed and move on."""
        ...


class StreamingSession:
    """
    HTTP byte-stream session for one resolved track.

    Usage:
        async with StreamingSession(resolved, http_session, controller) as stream:
            async for chunk in stream.iter_chunks():
                player.feed(chunk)
    """

    def __init__(
        self,
        resolved: ResolvedStream,
        http_session: aiohttp.ClientSession,
        controller: Optional[PlaybackController] = None,
        connect_timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        """
        Initialize session.

        Args:
            resolved: Output of the resolution pipeline
            http_session: Shared HTTP session (owned by the caller)
            controller: Playback controller told about stream failures
            connect_timeout: Connect timeout; reads have no total timeout
        """
        self._resolved = resolved
        self._http = http_session
        self._controller = controller
        self._timeout = aiohttp.ClientTimeout(total=None, connect=connect_timeout)
        self._response: Optional[aiohttp.ClientResponse] = None
        self._failed = False
        self.bytes_read = 0

    @property
    def url(self) -> str:
        """Resolved CDN URL."""
        return self._resolved.url

    @property
    def content_type(self) -> str:
        """Content type announced to the player."""
        return self._resolved.content_type

    @property
    def duration(self) -> float:
        """Track duration in seconds."""
        return self._resolved.duration

    @property
    def metadata(self) -> TrackMetadata:
        """Display metadata for the track."""
        return self._resolved.metadata

    @property
    def is_open(self) -> bool:
        """Check if the upstream response is open."""
        return self._response is not None

    @property
    def failed(self) -> bool:
        """Check if the stream broke."""
        return self._failed

    def can_seek(self) -> bool:
        """The upstream transport does not support seeking."""
        return False

    def is_remote(self) -> bool:
        """Audio comes from the network."""
        return True

    def get_format_for_url(self) -> str:
        """Audio format of the stream."""
        return self._resolved.format

    async def open(self) -> bool:
        """
        Connect to the CDN URL.

        Returns:
            True if the stream is ready to read
        """
        if self._response is not None:
            return True
        if self._failed:
            # Already reported; the player has moved on
            return False

        logger.info(f"Remote streaming track {self.metadata.id}: {self.url}")
        try:
            response = await self._http.get(self.url, timeout=self._timeout)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.handle_direct_error(type(e).__name__, str(e))
            return False

        if response.status >= 400:
            status_line = f"{response.status} {response.reason or ''}".strip()
            response.release()
            self.handle_direct_error(str(response.status), status_line)
            return False

        self._response = response
        return True

    async def iter_chunks(self, chunk_size: int = STREAM_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """
        Yield audio bytes until the stream ends or breaks.

        A broken stream is reported to the controller and ends the iteration.
        """
        response = self._response if await self.open() else None
        if response is None:
            return

        try:
            async for chunk in response.content.iter_chunked(chunk_size):
                self.bytes_read += len(chunk)
                yield chunk
        except (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError) as e:
            logger.debug(f"Stream broke after {self.bytes_read} bytes")
            self.handle_direct_error(type(e).__name__, str(e))
        finally:
            self.close()

    def handle_direct_error(self, response: str, status_line: str) -> None:
        """Report a broken stream so the player can skip to the next item."""
        self._failed = True
        logger.info(f"Direct stream failed: {self.url} [{response}] {status_line}")
        if self._controller is not None:
            try:
                self._controller.player_streaming_failed(ErrorKind.DIRECT_STREAM_FAILED)
            except Exception as e:
                logger.error(f"Streaming failed callback error: {e}")

    def close(self) -> None:
        """Release the upstream response."""
        if self._response is not None:
            self._response.release()
            self._response = None

    async def __aenter__(self) -> "StreamingSession":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        self.close()
