"""
Turns a track's transcoding into the URL its media bytes can be streamed from.
"""

import logging

import aiohttp
from pydantic import ValidationError

from soundcloud_cli.exceptions import RetriesExhaustedError
from soundcloud_cli.models.results import (
    FailureKind,
    ResolutionFailure,
    ResolutionResult,
    ResolvedMedia,
    Unavailable,
)
from soundcloud_cli.models.track import Track, TrackMediaInformation, Transcoding

from .manifest import ManifestRewriter, is_manifest_url
from .selector import select_transcoding

log = logging.getLogger(__name__)


class StreamLocationResolver:
    """
    Resolves tracks to media URLs in two stages: the transcoding endpoint
    returns a JSON document naming the media URL, and HLS playlists are then
    rewritten into a direct segment URL.
    """

    def __init__(self, api_client):
        self.api_client = api_client
        self._manifests = ManifestRewriter(api_client)

    async def resolve(self, track: Track) -> ResolutionResult:
        """
        Resolves ``track`` to a media URL.

        Blocked tracks and tracks without a usable transcoding come back as
        ``Unavailable`` without any request being made.
        """
        if track.is_blocked:
            log.debug(f"Track {track.id} is blocked by policy '{track.policy}'.")
            return Unavailable("This track is not available in your country")

        if not track.transcodings:
            return Unavailable("No transcodings found")

        transcoding = select_transcoding(track.transcodings)
        if transcoding is None or not transcoding.url:
            formats = ", ".join(
                f"{t.quality}/{t.format.protocol if t.format else '?'}"
                for t in track.transcodings
            )
            return Unavailable(f"No matching transcoding (available: {formats})")

        result = await self.resolve_transcoding(transcoding)
        if not result.ok:
            log.warning(f"[yellow]Could not resolve track {track.id}: {result}[/yellow]")
        return result

    async def resolve_transcoding(self, transcoding: Transcoding) -> ResolutionResult:
        """Performs the network stages for an already selected transcoding."""
        log.debug(f"Resolving {transcoding.preset or 'transcoding'} at {transcoding.url}")
        try:
            body = await self.api_client.get_text(transcoding.url)
            info = TrackMediaInformation.model_validate_json(body)
            if not info.url:
                return ResolutionFailure(
                    FailureKind.UNPARSABLE, "Transcoding response carried no url"
                )

            if not is_manifest_url(info.url):
                return ResolvedMedia(url=info.url, transcoding=transcoding)

            log.debug(f"Media URL is an HLS playlist, rewriting: {info.url}")
            direct_url = await self._manifests.fetch_direct_url(info.url)
            if direct_url is None:
                return ResolutionFailure(
                    FailureKind.EMPTY_MANIFEST, f"No entry found in {info.url}"
                )
            return ResolvedMedia(
                url=direct_url, transcoding=transcoding, from_manifest=True
            )

        except ValidationError as e:
            return ResolutionFailure(FailureKind.UNPARSABLE, str(e))
        except RetriesExhaustedError as e:
            return ResolutionFailure(FailureKind.RETRIES_EXHAUSTED, str(e))
        except aiohttp.ClientResponseError as e:
            return ResolutionFailure(
                FailureKind.HTTP_ERROR, f"HTTP {e.status} from {e.request_info.url}"
            )
