"""
Recovers a single direct media URL from an HLS playlist.

This is a heuristic, not an HLS client: the playlist body is split on commas,
the last entry is taken, and the path component after ``media`` is replaced
with ``0``. SoundCloud serves the whole (or nearly the whole) track from that
segment-0 address. Verify against current host behaviour before relying on it.
"""

import logging
from typing import Optional

log = logging.getLogger(__name__)

MANIFEST_MARKER = ".m3u8"
MEDIA_SEGMENT = "media"


def is_manifest_url(url: str) -> bool:
    return MANIFEST_MARKER in url


def rewrite_manifest(body: str) -> Optional[str]:
    """
    Rewrites the last entry of an HLS playlist into a segment-0 URL.

    Returns None for an empty body or when no URL line remains.
    """
    if not body or not body.strip():
        return None

    last_entry = body.split(",")[-1]
    components = last_entry.split("/")
    for i, component in enumerate(components[:-1]):
        if component == MEDIA_SEGMENT:
            components[i + 1] = "0"

    rewritten = "/".join(components)
    # The entry after the final comma starts with the newline ending #EXTINF.
    for line in rewritten.splitlines():
        if line.strip():
            return line.strip()
    return None


class ManifestRewriter:
    """Fetches an HLS playlist and rewrites it into a direct URL."""

    def __init__(self, api_client):
        self.api_client = api_client

    async def fetch_direct_url(self, manifest_url: str) -> Optional[str]:
        body = await self.api_client.get_text(manifest_url, with_client_id=False)
        direct_url = rewrite_manifest(body)
        if direct_url is None:
            log.debug(f"Manifest at {manifest_url} yielded no usable entry.")
        return direct_url
