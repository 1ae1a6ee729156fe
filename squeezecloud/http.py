"""
Shared HTTP helpers.

Builds aiohttp sessions with explicit TLS settings and the OAuth header
used for every catalog request.
"""

import logging
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)

# Default transport timeout (redirect probe, stream connect)
HTTP_TIMEOUT_SECONDS = 15
# Catalog track lookups are allowed to take longer
CATALOG_TIMEOUT_SECONDS = 35

USER_AGENT = "SqueezeCloud"


def auth_headers(api_key: str) -> dict[str, str]:
    """Build the catalog authorization header."""
    return {"Authorization": f"OAuth {api_key}"}


def create_session(
    insecure_https: bool = False,
    timeout: Optional[aiohttp.ClientTimeout] = None,
) -> aiohttp.ClientSession:
    """
    Create an HTTP session.

    Args:
        insecure_https: Skip TLS certificate verification for this session only
        timeout: Default timeout (15s total if omitted)

    Returns:
        New aiohttp ClientSession; caller must close it
    """
    if insecure_https:
        logger.warning("TLS certificate verification disabled")
        connector = aiohttp.TCPConnector(ssl=False)
    else:
        connector = aiohttp.TCPConnector()
    return aiohttp.ClientSession(
        connector=connector,
        timeout=timeout or aiohttp.ClientTimeout(total=HTTP_TIMEOUT_SECONDS),
        headers={"User-Agent": USER_AGENT},
    )
