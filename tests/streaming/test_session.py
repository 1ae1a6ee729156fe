"""Tests for the streaming session adapter."""

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from aiohttp.test_utils import TestServer

from squeezecloud.errors import ErrorKind
from squeezecloud.playback.metadata import TrackMetadata
from squeezecloud.playback.pipeline import ResolvedStream
from squeezecloud.streaming.session import StreamingSession


class FakeController:
    """Records streaming failures."""

    def __init__(self) -> None:
        self.failures: list[str] = []

    def player_streaming_failed(self, error_key: str) -> None:
        self.failures.append(error_key)


def _resolved(url: str) -> ResolvedStream:
    return ResolvedStream(
        url=url,
        metadata=TrackMetadata(id="555", title="Song", duration=180),
        duration=180.0,
    )


class TestStreamingSession:
    """Tests for StreamingSession."""

    def test_capabilities(self) -> None:
        """Test the session is remote, unseekable MP3."""
        stream = StreamingSession(_resolved("https://cdn.example/x.mp3"), MagicMock())

        assert stream.can_seek() is False
        assert stream.is_remote() is True
        assert stream.get_format_for_url() == "mp3"
        assert stream.content_type == "audio/mpeg"
        assert stream.duration == 180.0
        assert stream.metadata.title == "Song"
        assert stream.is_open is False

    @pytest.mark.asyncio
    async def test_streams_all_bytes(self, fake_catalog) -> None:
        """Test the full body is delivered in chunks."""
        controller = FakeController()

        async with TestServer(fake_catalog.app()) as server:
            async with aiohttp.ClientSession() as session:
                stream = StreamingSession(
                    _resolved(str(server.make_url("/media/555"))), session, controller
                )
                data = b"".join([chunk async for chunk in stream.iter_chunks(chunk_size=1024)])

        assert data == fake_catalog.media
        assert stream.bytes_read == len(fake_catalog.media)
        assert stream.failed is False
        assert stream.is_open is False
        assert controller.failures == []

    @pytest.mark.asyncio
    async def test_context_manager_opens(self, fake_catalog) -> None:
        async with TestServer(fake_catalog.app()) as server:
            async with aiohttp.ClientSession() as session:
                async with StreamingSession(
                    _resolved(str(server.make_url("/media/555"))), session
                ) as stream:
                    assert stream.is_open is True
                assert stream.is_open is False

    @pytest.mark.asyncio
    async def test_http_error_reports_failure(self, fake_catalog) -> None:
        """Test an error status is reported to the controller."""
        controller = FakeController()

        async with TestServer(fake_catalog.app()) as server:
            async with aiohttp.ClientSession() as session:
                stream = StreamingSession(
                    _resolved(str(server.make_url("/missing.mp3"))), session, controller
                )
                assert await stream.open() is False

        assert stream.failed is True
        assert controller.failures == [ErrorKind.DIRECT_STREAM_FAILED]

    @pytest.mark.asyncio
    async def test_connection_error_reports_failure(self) -> None:
        controller = FakeController()

        async with aiohttp.ClientSession() as session:
            stream = StreamingSession(
                _resolved("http://127.0.0.1:1/x.mp3"), session, controller
            )
            chunks = [chunk async for chunk in stream.iter_chunks()]

        assert chunks == []
        assert controller.failures == [ErrorKind.DIRECT_STREAM_FAILED]

    @pytest.mark.asyncio
    async def test_mid_stream_break_reports_failure(self) -> None:
        """Test a payload error after some bytes ends the stream and reports it."""
        controller = FakeController()

        async def broken_chunks(chunk_size):
            yield b"abc"
            raise aiohttp.ClientPayloadError("connection reset")

        response = MagicMock()
        response.status = 200
        response.content.iter_chunked = broken_chunks
        http = MagicMock()
        http.get = AsyncMock(return_value=response)

        stream = StreamingSession(_resolved("https://cdn.example/x.mp3"), http, controller)
        chunks = [chunk async for chunk in stream.iter_chunks()]

        assert chunks == [b"abc"]
        assert stream.bytes_read == 3
        assert stream.failed is True
        assert controller.failures == [ErrorKind.DIRECT_STREAM_FAILED]
        response.release.assert_called_once()

    @pytest.mark.asyncio
    async def test_controller_exception_is_contained(self) -> None:
        controller = MagicMock()
        controller.player_streaming_failed.side_effect = RuntimeError("host bug")

        async with aiohttp.ClientSession() as session:
            stream = StreamingSession(
                _resolved("http://127.0.0.1:1/x.mp3"), session, controller
            )
            assert await stream.open() is False

        assert stream.failed is True

    @pytest.mark.asyncio
    async def test_failed_open_reported_once_with_context_manager(self) -> None:
        """Test a failed open is not retried by iter_chunks."""
        controller = FakeController()
        http = MagicMock()
        http.get = AsyncMock(side_effect=aiohttp.ClientConnectionError("refused"))

        async with StreamingSession(
            _resolved("https://cdn.example/x.mp3"), http, controller
        ) as stream:
            chunks = [chunk async for chunk in stream.iter_chunks()]

        assert chunks == []
        assert http.get.await_count == 1
        assert controller.failures == [ErrorKind.DIRECT_STREAM_FAILED]
