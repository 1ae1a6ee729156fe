"""Shared fixtures: an in-process fake of the SoundCloud catalog."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import pytest
from aiohttp import web


@dataclass
class FakeCatalog:
    """
    Fake catalog and CDN.

    - ``tracks``: track ID -> JSON body for ``/tracks/<id>``. ``stream_url``
      and ``download_url`` values starting with "/" are made absolute.
    - ``raw_tracks``: track ID -> (status, text or bytes) served verbatim.
    - ``stream_targets``: stream name -> Location value, or None for a 200
      response without a redirect. Unknown names redirect to the CDN.
    - ``resolve``: page URL -> JSON body for ``/resolve``.
    - ``media``: bytes served from ``/media/<name>``.
    """

    tracks: dict[str, Any] = field(default_factory=dict)
    raw_tracks: dict[str, tuple[int, Union[str, bytes]]] = field(default_factory=dict)
    stream_targets: dict[str, Optional[str]] = field(default_factory=dict)
    resolve: dict[str, Any] = field(default_factory=dict)
    media: bytes = b"ID3" + b"\x00" * 4096
    delay: float = 0.0
    track_hits: list[str] = field(default_factory=list)
    stream_hits: list[str] = field(default_factory=list)
    auth_headers: list[str] = field(default_factory=list)

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/tracks/{track_id}", self._handle_track)
        app.router.add_get("/stream/{name}", self._handle_stream)
        app.router.add_get("/resolve", self._handle_resolve)
        app.router.add_get("/media/{name}", self._handle_media)
        return app

    async def _handle_track(self, request: web.Request) -> web.Response:
        track_id = request.match_info["track_id"]
        self.track_hits.append(track_id)
        self.auth_headers.append(request.headers.get("Authorization", ""))
        if self.delay:
            await asyncio.sleep(self.delay)

        if track_id in self.raw_tracks:
            status, content = self.raw_tracks[track_id]
            if isinstance(content, bytes):
                return web.Response(status=status, body=content)
            return web.Response(status=status, text=content)

        if track_id not in self.tracks:
            return web.json_response({"error": "404 - Not Found"}, status=404)

        origin = str(request.url.origin())
        body = dict(self.tracks[track_id])
        for key in ("stream_url", "download_url"):
            value = body.get(key)
            if isinstance(value, str) and value.startswith("/"):
                body[key] = origin + value
        return web.json_response(body)

    async def _handle_stream(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        self.stream_hits.append(name)
        self.auth_headers.append(request.headers.get("Authorization", ""))
        if name in self.stream_targets and self.stream_targets[name] is None:
            return web.Response(status=200, text="no redirect here")
        location = self.stream_targets.get(name, f"https://cdn.example/{name}.mp3")
        return web.Response(status=302, headers={"Location": location}, text="redirecting")

    async def _handle_resolve(self, request: web.Request) -> web.Response:
        url = request.query.get("url", "")
        self.auth_headers.append(request.headers.get("Authorization", ""))
        if url not in self.resolve:
            return web.json_response({"error": "404 - Not Found"}, status=404)
        return web.json_response(self.resolve[url])

    async def _handle_media(self, request: web.Request) -> web.Response:
        return web.Response(body=self.media, content_type="audio/mpeg")


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    """Create a fake catalog with one streamable track (555)."""
    return FakeCatalog(
        tracks={
            "555": {
                "id": 555,
                "duration": 180000,
                "title": "Song",
                "user": {"username": "Artist"},
                "stream_url": "/stream/555",
            }
        }
    )
