"""
Error kinds and exceptions raised while resolving tracks.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """
    Symbolic failure identifiers passed to the host's error callback.

    The host maps these to localized user-facing text (see ``host_string``).
    """

    CATALOG_FETCH_FAILED = "CatalogFetchFailed"
    CATALOG_REPORTED_ERROR = "CatalogReportedError"
    STREAM_RESOLUTION_FAILED = "StreamResolutionFailed"
    TRANSPORT_FAILURE = "TransportFailure"
    DIRECT_STREAM_FAILED = "DirectStreamFailed"

    @property
    def host_string(self) -> str:
        """Localization key the host uses for this failure."""
        return HOST_STRINGS[self]


HOST_STRINGS: dict[ErrorKind, str] = {
    ErrorKind.CATALOG_FETCH_FAILED: "PLUGIN_SQUEEZECLOUD_NO_INFO",
    ErrorKind.CATALOG_REPORTED_ERROR: "PLUGIN_SQUEEZECLOUD_NO_INFO",
    ErrorKind.STREAM_RESOLUTION_FAILED: "PLUGIN_SQUEEZECLOUD_STREAM_FAILED",
    ErrorKind.TRANSPORT_FAILURE: "PLUGIN_SQUEEZECLOUD_ERROR",
    ErrorKind.DIRECT_STREAM_FAILED: "PLUGIN_SQUEEZECLOUD_STREAM_FAILED",
}


class ResolverError(Exception):
    """Base error for a failed track resolution."""

    kind: ErrorKind = ErrorKind.CATALOG_FETCH_FAILED

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail

    @property
    def host_string(self) -> str:
        """Localization key the host shows for this failure."""
        return self.kind.host_string


class CatalogError(ResolverError):
    """Catalog request failed."""

    pass


class CatalogFetchFailed(CatalogError):
    """Network failure or unparseable body while contacting the catalog."""

    kind = ErrorKind.CATALOG_FETCH_FAILED

    def __init__(self, detail: str = "", transport: bool = False):
        super().__init__(detail)
        self.transport = transport

    @property
    def host_string(self) -> str:
        # Unreachable catalog gets the generic error text, not "no info"
        if self.transport:
            return HOST_STRINGS[ErrorKind.TRANSPORT_FAILURE]
        return super().host_string


class CatalogReportedError(CatalogError):
    """Catalog answered with an explicit ``error`` payload."""

    kind = ErrorKind.CATALOG_REPORTED_ERROR


class ResolutionError(ResolverError):
    """Stream source could not be turned into a media URL."""

    kind = ErrorKind.STREAM_RESOLUTION_FAILED


class StreamResolutionFailed(ResolutionError):
    """Redirect probe returned no Location header."""

    kind = ErrorKind.STREAM_RESOLUTION_FAILED

    def __init__(self, detail: str = "", status: int = 0, body: str = ""):
        super().__init__(detail)
        self.status = status
        self.body = body


class TransportFailure(ResolutionError):
    """Connection, TLS or timeout error during the redirect probe."""

    kind = ErrorKind.TRANSPORT_FAILURE
