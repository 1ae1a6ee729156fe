"""
SqueezeCloud Application.

Wires the HTTP session, preferences, cache and resolution pipeline together
and manages their lifecycle.
"""

import logging
from typing import Any, Optional

import aiohttp

from squeezecloud.catalog import CatalogClient, CatalogPlaylistExpander, StreamResolver
from squeezecloud.config import Config
from squeezecloud.http import create_session
from squeezecloud.playback import (
    ErrorCallback,
    MetadataCache,
    PlaylistExpander,
    ResolvedStream,
    SuccessCallback,
    TrackMetadata,
    TrackResolution,
    TrackResolver,
)
from squeezecloud.prefs import DEFAULT_PREFS, PREF_API_KEY, PREF_PLAYMETHOD, Preferences
from squeezecloud.streaming import PlaybackController, StreamingSession

logger = logging.getLogger(__name__)


class SqueezeCloud:
    """
    Main SqueezeCloud application.

    Usage:
        async with SqueezeCloud(config) as app:
            resolved = await app.resolve("soundcloud://123")
            async with app.open_stream(resolved) as stream:
                ...
    """

    def __init__(
        self,
        config: Config,
        prefs: Optional[Preferences] = None,
        playlist_expander: Optional[PlaylistExpander] = None,
    ):
        """
        Initialize SqueezeCloud.

        Args:
            config: Validated configuration
            prefs: Preferences store (loaded from config.prefs.path if omitted)
            playlist_expander: Expander for SoundCloud page URLs
        """
        self._config = config
        self._prefs = prefs or Preferences(config.prefs.path)
        self._playlist_expander = playlist_expander
        self._cache = MetadataCache(
            default_ttl=config.cache.ttl,
            _max_size=config.cache.max_size,
        )

        # Created in start()
        self._http: Optional[aiohttp.ClientSession] = None
        self._resolver: Optional[TrackResolver] = None

        self._apply_preferences()

    def _apply_preferences(self) -> None:
        """Seed preference defaults and apply explicit config overrides."""
        self._prefs.init(DEFAULT_PREFS)
        catalog = self._config.catalog
        if catalog.api_key is not None and catalog.api_key != self._prefs.get(PREF_API_KEY):
            self._prefs.set(PREF_API_KEY, catalog.api_key)
        if catalog.playmethod is not None and (
            catalog.playmethod != self._prefs.get(PREF_PLAYMETHOD)
        ):
            self._prefs.set(PREF_PLAYMETHOD, catalog.playmethod)

    @property
    def prefs(self) -> Preferences:
        """Live preferences."""
        return self._prefs

    @property
    def cache(self) -> MetadataCache:
        """Metadata cache."""
        return self._cache

    @property
    def resolver(self) -> TrackResolver:
        """Track resolver (available after start())."""
        if self._resolver is None:
            raise RuntimeError("SqueezeCloud is not started")
        return self._resolver

    async def start(self) -> None:
        """Create the HTTP session and resolution components."""
        if self._http is not None:
            return

        logger.debug("Starting SqueezeCloud...")
        self._http = create_session(insecure_https=self._config.catalog.insecure_https)
        catalog = CatalogClient(self._http, api_base=self._config.catalog.api_base)
        stream_resolver = StreamResolver(self._http)
        expander = self._playlist_expander or CatalogPlaylistExpander(
            self._http,
            api_key=lambda: self._prefs.get(PREF_API_KEY, "") or "",
            api_base=self._config.catalog.api_base,
        )
        self._resolver = TrackResolver(
            catalog=catalog,
            stream_resolver=stream_resolver,
            cache=self._cache,
            prefs=self._prefs,
            playlist_expander=expander,
        )
        if not self._prefs.get(PREF_API_KEY):
            logger.warning("No API key configured; catalog requests will be rejected")

    async def stop(self) -> None:
        """Close the HTTP session."""
        if self._http is not None:
            await self._http.close()
            self._http = None
        self._resolver = None
        logger.debug("SqueezeCloud stopped")

    async def __aenter__(self) -> "SqueezeCloud":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        await self.stop()

    async def get_next_track(
        self, uri: str, on_success: SuccessCallback, on_error: ErrorCallback
    ) -> TrackResolution:
        """Resolve a track reference through callbacks."""
        return await self.resolver.get_next_track(uri, on_success, on_error)

    async def resolve(self, uri: str) -> ResolvedStream:
        """Resolve a track reference, raising ResolverError on failure."""
        return await self.resolver.resolve(uri)

    def get_metadata_for(self, uri: str) -> Optional[TrackMetadata]:
        """Cached metadata for a track reference."""
        return self.resolver.get_metadata_for(uri)

    async def explode_playlist(self, uri: str) -> list[str]:
        """Expand a reference into playable references."""
        return await self.resolver.explode_playlist(uri)

    def open_stream(
        self,
        resolved: ResolvedStream,
        controller: Optional[PlaybackController] = None,
    ) -> StreamingSession:
        """Create a streaming session for a resolved track."""
        if self._http is None:
            raise RuntimeError("SqueezeCloud is not started")
        return StreamingSession(resolved, self._http, controller)
