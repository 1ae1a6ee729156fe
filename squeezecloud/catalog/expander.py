"""
Page URL expansion through the catalog ``/resolve`` endpoint.
"""

import asyncio
import logging
from typing import Any, Callable

import aiohttp

from squeezecloud.errors import CatalogFetchFailed, CatalogReportedError
from squeezecloud.http import CATALOG_TIMEOUT_SECONDS, auth_headers

logger = logging.getLogger(__name__)


class CatalogPlaylistExpander:
    """
    Expands SoundCloud page URLs (tracks, sets, user pages) into
    ``soundcloud://<id>`` references.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: Callable[[], str],
        api_base: str = "https://api.soundcloud.com",
        timeout: float = CATALOG_TIMEOUT_SECONDS,
    ):
        """
        Initialize expander.

        Args:
            session: Shared HTTP session (owned by the caller)
            api_key: Returns the current OAuth token
            api_base: Catalog base URL
            timeout: Total request timeout in seconds
        """
        self._session = session
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def expand(self, uri: str) -> list[str]:
        """
        Resolve a page URL and list the tracks it contains.

        Raises:
            CatalogFetchFailed: Transport error or unusable response
            CatalogReportedError: Catalog returned an ``error`` payload
        """
        url = f"{self._api_base}/resolve"
        try:
            async with self._session.get(
                url,
                params={"url": uri},
                headers=auth_headers(self._api_key()),
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise CatalogFetchFailed(str(e) or type(e).__name__, transport=True) from e
        except asyncio.TimeoutError as e:
            raise CatalogFetchFailed("Timed out contacting catalog", transport=True) from e
        except ValueError as e:
            raise CatalogFetchFailed(str(e)) from e

        if isinstance(data, dict) and data.get("error"):
            raise CatalogReportedError(str(data["error"]))
        if status >= 400:
            raise CatalogFetchFailed(f"HTTP {status}")

        refs = [f"soundcloud://{track['id']}" for track in _tracks_in(data)]
        logger.debug(f"Expanded {uri} into {len(refs)} tracks")
        return refs


def _tracks_in(data: Any) -> list[dict]:
    """Track objects contained in a resolve response."""
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and data.get("kind") == "track":
        items = [data]
    elif isinstance(data, dict):
        items = data.get("tracks") or data.get("collection") or []
    else:
        items = []
    return [t for t in items if isinstance(t, dict) and t.get("id") is not None]
