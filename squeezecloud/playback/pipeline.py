"""
Track resolution pipeline.

Runs catalog fetch, stream resolution and metadata caching in order for one
``soundcloud://<id>`` reference, and reports the outcome through a success
or an error callback.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from squeezecloud.catalog.client import CatalogClient
from squeezecloud.catalog.resolver import StreamResolver
from squeezecloud.catalog.types import PlayMethod, TrackRecord
from squeezecloud.errors import (
    CatalogFetchFailed,
    ErrorKind,
    ResolverError,
    StreamResolutionFailed,
)
from squeezecloud.prefs import PREF_API_KEY, PREF_PLAYMETHOD, Preferences

from .cache import MetadataCache
from .metadata import TrackMetadata, make_metadata
from .playlist import PlaylistExpander
from .uri import is_page_url, parse_track_uri

logger = logging.getLogger(__name__)

STREAM_CONTENT_TYPE = "audio/mpeg"
STREAM_FORMAT = "mp3"


@dataclass(frozen=True)
class ResolvedStream:
    """A playable CDN URL and the metadata for the same track."""

    url: str
    metadata: TrackMetadata
    duration: float = 0.0  # Unrounded seconds, for the player
    content_type: str = STREAM_CONTENT_TYPE
    format: str = STREAM_FORMAT


# Callback types
SuccessCallback = Callable[[ResolvedStream], None]
ErrorCallback = Callable[[ErrorKind, str], None]  # error_kind, detail


class ResolutionState(Enum):
    """Pipeline states. Each instance only moves forward."""

    IDLE = "idle"
    FETCHING_METADATA = "fetching_metadata"
    RESOLVING_STREAM = "resolving_stream"
    CACHING_METADATA = "caching_metadata"
    READY = "ready"
    FAILED = "failed"


class TrackResolution:
    """
    One single-pass resolution of a track reference.

    IDLE -> FETCHING_METADATA -> RESOLVING_STREAM -> CACHING_METADATA -> READY,
    with FAILED reachable from either network step. Exactly one of the two
    callbacks fires. Instances are not reusable.
    """

    def __init__(
        self,
        uri: str,
        catalog: CatalogClient,
        resolver: StreamResolver,
        cache: MetadataCache,
        api_key: str,
        play_method: PlayMethod,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.uri = uri
        self.track_id = parse_track_uri(uri)
        self._catalog = catalog
        self._resolver = resolver
        self._cache = cache
        self._api_key = api_key
        self._play_method = play_method
        self._on_success = on_success
        self._on_error = on_error

        self._state = ResolutionState.IDLE
        self.record: Optional[TrackRecord] = None
        self.stream_url: Optional[str] = None
        self.resolved: Optional[ResolvedStream] = None
        self.error: Optional[ResolverError] = None

    @property
    def state(self) -> ResolutionState:
        """Current state."""
        return self._state

    async def run(self) -> Optional[ResolvedStream]:
        """
        Run the pipeline to completion.

        Returns:
            ResolvedStream on success, None on failure (see ``error``)

        Raises:
            RuntimeError: If this instance already ran
        """
        if self._state != ResolutionState.IDLE:
            raise RuntimeError(f"Resolution for {self.uri} already ran")

        if self.track_id is None:
            self._fail(CatalogFetchFailed(f"Invalid track reference: {self.uri}"))
            return None

        # 1. Catalog
        self._state = ResolutionState.FETCHING_METADATA
        try:
            record = await self._catalog.fetch_track(self.track_id, self._api_key)
        except ResolverError as e:
            self._fail(e)
            return None
        except Exception as e:
            logger.exception(f"Unexpected error fetching track {self.track_id}")
            self._fail(CatalogFetchFailed(str(e) or type(e).__name__))
            return None
        self.record = record

        # 2. Redirect probe
        self._state = ResolutionState.RESOLVING_STREAM
        try:
            stream_url = await self._resolver.resolve_stream_url(
                record, self._play_method, self._api_key
            )
        except ResolverError as e:
            self._fail(e)
            return None
        except Exception as e:
            logger.exception(f"Unexpected error resolving stream for track {self.track_id}")
            self._fail(StreamResolutionFailed(str(e) or type(e).__name__))
            return None
        self.stream_url = stream_url

        # 3. Cache
        self._state = ResolutionState.CACHING_METADATA
        try:
            metadata = make_metadata(record)
        except Exception as e:
            logger.exception(f"Unusable catalog record for track {self.track_id}")
            self._fail(CatalogFetchFailed(str(e) or type(e).__name__))
            return None
        self._cache_metadata(metadata)

        self.resolved = ResolvedStream(
            url=stream_url,
            metadata=metadata,
            duration=record.duration_s,
        )
        self._state = ResolutionState.READY
        logger.info(f"Resolved track {self.track_id}: {metadata.artist} - {metadata.title}")
        self._notify_success(self.resolved)
        return self.resolved

    def _cache_metadata(self, metadata: TrackMetadata) -> None:
        """Write metadata to the cache. Cache errors never fail playback."""
        try:
            self._cache.set_track(metadata)
        except Exception as e:
            logger.warning(f"Failed to cache metadata for track {metadata.id}: {e}")

    def _fail(self, error: ResolverError) -> None:
        self.error = error
        self._state = ResolutionState.FAILED
        logger.warning(f"Resolution failed for {self.uri}: {error.kind.value}: {error.detail}")
        self._notify_error(error.kind, error.detail)

    def _notify_success(self, resolved: ResolvedStream) -> None:
        """Notify caller of success."""
        if self._on_success:
            try:
                self._on_success(resolved)
            except Exception as e:
                logger.error(f"Success callback error: {e}")

    def _notify_error(self, kind: ErrorKind, detail: str) -> None:
        """Notify caller of failure."""
        if self._on_error:
            try:
                self._on_error(kind, detail)
            except Exception as e:
                logger.error(f"Error callback error: {e}")


class TrackResolver:
    """
    Entry point used by the player host.

    Reads the live preferences for every request and runs an independent
    TrackResolution per call. Concurrent calls for different tracks share
    nothing but the cache; concurrent catalog fetches for the same track
    share one request inside the CatalogClient.

    Usage:
        resolver = TrackResolver(catalog, stream_resolver, cache, prefs)
        await resolver.get_next_track("soundcloud://123", on_success, on_error)
    """

    def __init__(
        self,
        catalog: CatalogClient,
        stream_resolver: StreamResolver,
        cache: MetadataCache,
        prefs: Preferences,
        playlist_expander: Optional[PlaylistExpander] = None,
    ):
        self._catalog = catalog
        self._stream_resolver = stream_resolver
        self._cache = cache
        self._prefs = prefs
        self._playlist_expander = playlist_expander

    @property
    def cache(self) -> MetadataCache:
        """Metadata cache written by resolutions."""
        return self._cache

    def create_resolution(
        self,
        uri: str,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> TrackResolution:
        """Build a resolution using the current preferences."""
        return TrackResolution(
            uri=uri,
            catalog=self._catalog,
            resolver=self._stream_resolver,
            cache=self._cache,
            api_key=self._prefs.get(PREF_API_KEY, "") or "",
            play_method=PlayMethod.parse(self._prefs.get(PREF_PLAYMETHOD)),
            on_success=on_success,
            on_error=on_error,
        )

    async def get_next_track(
        self,
        uri: str,
        on_success: SuccessCallback,
        on_error: ErrorCallback,
    ) -> TrackResolution:
        """
        Resolve a track reference, reporting through callbacks.

        Args:
            uri: ``soundcloud://<id>`` reference
            on_success: Called once with the ResolvedStream
            on_error: Called once with the error kind and detail text

        Returns:
            The finished TrackResolution
        """
        logger.debug(f"Getting next track for {uri}")
        resolution = self.create_resolution(uri, on_success, on_error)
        await resolution.run()
        return resolution

    async def resolve(self, uri: str) -> ResolvedStream:
        """
        Resolve a track reference.

        Raises:
            ResolverError: If any step fails
        """
        resolution = self.create_resolution(uri)
        resolved = await resolution.run()
        if resolved is None:
            raise resolution.error or CatalogFetchFailed(f"Resolution failed for {uri}")
        return resolved

    def get_metadata_for(self, uri: str) -> Optional[TrackMetadata]:
        """Cached metadata for a reference, without network access."""
        track_id = parse_track_uri(uri)
        if track_id is None:
            return None
        return self._cache.get_track(track_id)

    async def explode_playlist(self, uri: str) -> list[str]:
        """
        Expand a reference into playable references.

        Page URLs are handed to the playlist expander; everything else is
        returned as a single-item list.
        """
        if not is_page_url(uri) or self._playlist_expander is None:
            return [uri]

        try:
            return list(await self._playlist_expander.expand(uri))
        except Exception as e:
            logger.error(f"Failed to expand {uri}: {e}")
            return []
