"""
SoundCloud catalog API client.

Fetches one track description per request and turns the JSON response
into a TrackRecord.
"""

import asyncio
import json
import logging
from typing import Any, Optional

import aiohttp

from squeezecloud.errors import CatalogFetchFailed, CatalogReportedError
from squeezecloud.http import CATALOG_TIMEOUT_SECONDS, auth_headers

from .inflight import InflightRegistry
from .types import TrackRecord

logger = logging.getLogger(__name__)


class CatalogClient:
    """Authenticated client for the catalog ``/tracks/<id>`` endpoint."""

    API_BASE = "https://api.soundcloud.com"

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_base: str = API_BASE,
        timeout: float = CATALOG_TIMEOUT_SECONDS,
        inflight: Optional[InflightRegistry[TrackRecord]] = None,
    ):
        """
        Initialize catalog client.

        Args:
            session: Shared HTTP session (owned by the caller)
            api_base: Catalog base URL
            timeout: Total request timeout in seconds
            inflight: Registry used to share concurrent fetches of one track
        """
        self._session = session
        self._api_base = api_base.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._inflight: InflightRegistry[TrackRecord] = (
            inflight if inflight is not None else InflightRegistry()
        )

    def track_url(self, track_id: str) -> str:
        """Catalog URL for a track."""
        return f"{self._api_base}/tracks/{track_id}"

    async def fetch_track(self, track_id: str, api_key: str) -> TrackRecord:
        """
        Fetch a track description.

        Concurrent calls for the same track share a single request.

        Args:
            track_id: Catalog track ID
            api_key: OAuth token sent in the Authorization header

        Returns:
            Parsed TrackRecord

        Raises:
            CatalogFetchFailed: Transport error or unusable response body
            CatalogReportedError: Catalog returned an ``error`` payload
        """
        return await self._inflight.run(
            track_id, lambda: self._fetch_track(track_id, api_key)
        )

    async def _fetch_track(self, track_id: str, api_key: str) -> TrackRecord:
        url = self.track_url(track_id)
        logger.debug(f"Getting track from catalog for {track_id}")

        try:
            async with self._session.get(
                url, headers=auth_headers(api_key), timeout=self._timeout
            ) as resp:
                status = resp.status
                body = await resp.read()
        except aiohttp.ClientError as e:
            logger.warning(f"Catalog request failed for {track_id}: {e}")
            raise CatalogFetchFailed(str(e) or type(e).__name__, transport=True) from e
        except asyncio.TimeoutError as e:
            logger.warning(f"Catalog request timed out for {track_id}")
            raise CatalogFetchFailed("Timed out contacting catalog", transport=True) from e

        data = self._parse_body(track_id, body)

        if status >= 400:
            logger.warning(f"Catalog returned HTTP {status} for {track_id}")
            raise CatalogFetchFailed(f"HTTP {status}")

        record = TrackRecord.from_json(data)
        if not record.id:
            record.id = track_id
        logger.debug(f"Fetched track {record.id}: {record.username} - {record.title}")
        return record

    @staticmethod
    def _parse_body(track_id: str, body: bytes) -> dict[str, Any]:
        """Parse a catalog body, raising on parse errors and catalog errors."""
        try:
            data = json.loads(body.decode("utf-8"))
        except ValueError as e:  # Includes UnicodeDecodeError
            logger.warning(f"Catalog error getting track {track_id}: {e}")
            raise CatalogFetchFailed(str(e)) from e

        if not isinstance(data, dict):
            logger.warning(f"Catalog error getting track {track_id}: not a JSON object")
            raise CatalogFetchFailed("Unexpected catalog response")

        if data.get("error"):
            logger.warning(f"Catalog error getting track {track_id}: {data['error']}")
            raise CatalogReportedError(str(data["error"]))

        return data
