"""
Playlist expansion protocol.

Abstraction for turning a SoundCloud page URL into playable references.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class PlaylistExpander(Protocol):
    """
    Protocol for expanding page URLs.

    Implementations live with the host's browse menus; the resolver only
    needs the list of ``soundcloud://<id>`` references a page contains.
    """

    async def expand(self, uri: str) -> list[str]:
        """
        Expand a page URL.

        Args:
            uri: SoundCloud page URL

        Returns:
            Playable references, in page order

        Raises:
            Exception: If the page cannot be expanded
        """
        ...
