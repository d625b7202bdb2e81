"""
Operations related to SoundCloud playlists and albums, which the API treats alike.
"""

import asyncio
import logging
from typing import AsyncGenerator, Optional

from pydantic import ValidationError

from soundcloud_cli.exceptions import InvalidInputError, ResolutionError
from soundcloud_cli.models.track import Batch, Playlist, Track
from soundcloud_cli.utils.batch_fetcher import TrackBatchEnumerator
from soundcloud_cli.utils.path import is_playlist_url

from .client import SoundCloudAPIClient

log = logging.getLogger(__name__)


class PlaylistClient:
    def __init__(self, api_client: SoundCloudAPIClient):
        self.api_client = api_client
        self.enumerator = TrackBatchEnumerator(api_client)

    @staticmethod
    def is_url_valid(url: str) -> bool:
        return is_playlist_url(url)

    def _validate(self, url: str) -> None:
        if not self.is_url_valid(url):
            raise InvalidInputError(f"Invalid playlist url: {url}")

    async def get(self, url: str, populate_all_tracks: bool = True) -> Playlist:
        """
        Resolves a playlist URL into its metadata.

        Args:
            url: Playlist or album page URL.
            populate_all_tracks: When False, entries past the first few only
                carry their id; when True, every track is fetched through the
                batch endpoint and replaces its partial entry.

        Raises:
            InvalidInputError: If ``url`` is not a playlist URL. No request is made.
            ResolutionError: If the host returns a document that is not a playlist.
        """
        self._validate(url)
        payload = await self.api_client.resolve_url(url)
        try:
            playlist = Playlist.model_validate(payload)
        except ValidationError as e:
            raise ResolutionError(f"Unexpected playlist payload for {url}: {e}") from e

        if populate_all_tracks:
            tracks = [t async for t in self._flatten(self.iter_batches(playlist))]
            playlist = playlist.model_copy(update={"tracks": tracks})
        return playlist

    def get_track_batches(
        self,
        url: str,
        offset: int = 0,
        limit: int = 0,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncGenerator[Batch, None]:
        """
        Enumerates batches of at most 50 tracks in playlist order.

        The URL is validated immediately; the playlist itself is resolved on
        the first pull.
        """
        self._validate(url)

        async def batches() -> AsyncGenerator[Batch, None]:
            playlist = await self.get(url, populate_all_tracks=False)
            async for batch in self.iter_batches(
                playlist, offset, limit, cancel_event
            ):
                yield batch

        return batches()

    def get_tracks(
        self,
        url: str,
        offset: int = 0,
        limit: int = 0,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncGenerator[Track, None]:
        """Enumerates the tracks of a playlist one by one."""
        return self._flatten(self.get_track_batches(url, offset, limit, cancel_event))

    def iter_batches(
        self,
        playlist: Playlist,
        offset: int = 0,
        limit: int = 0,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncGenerator[Batch, None]:
        return self.enumerator.iter_batches(
            playlist.track_ids, offset, limit, cancel_event
        )

    @staticmethod
    async def _flatten(
        batches: AsyncGenerator[Batch, None],
    ) -> AsyncGenerator[Track, None]:
        async for batch in batches:
            for track in batch:
                yield track
