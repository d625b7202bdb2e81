"""
High-level entry point tying the API, resolution and download layers together.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from soundcloud_cli.api import (
    ClientIdFetcher,
    PlaylistClient,
    SoundCloudAPIClient,
    TrackClient,
)
from soundcloud_cli.api.client import API_BASE_URL
from soundcloud_cli.media import Downloader, StreamLocationResolver
from soundcloud_cli.media.downloader import ProgressSink
from soundcloud_cli.models.config import ClientConfig
from soundcloud_cli.models.results import DownloadResult, ResolutionResult
from soundcloud_cli.models.track import Track

log = logging.getLogger(__name__)


class SoundCloudClient:
    """
    Resolves and downloads SoundCloud tracks and playlists.

    Usage:
        async with SoundCloudClient(ClientConfig(client_id="...")) as sc:
            track = await sc.tracks.get("https://soundcloud.com/artist/song")
            await sc.download(track, "song.mp3")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        api_base_url: str = API_BASE_URL,
    ):
        self.api = SoundCloudAPIClient(config or ClientConfig(), api_base_url)
        self.tracks = TrackClient(self.api)
        self.playlists = PlaylistClient(self.api)
        self.resolver = StreamLocationResolver(self.api)
        self.downloader = Downloader(self.api)

    @property
    def client_id(self) -> str:
        return self.api.config.client_id

    async def set_client_id(self, fetcher: Optional[ClientIdFetcher] = None) -> str:
        """Bootstraps a fresh client_id from the SoundCloud web app and installs it."""
        client_id = await (fetcher or ClientIdFetcher()).fetch()
        self.api.set_client_id(client_id)
        log.info(f"Using client_id {client_id[:8]}...")
        return client_id

    async def get_download_url(self, track: Track) -> ResolutionResult:
        return await self.resolver.resolve(track)

    async def download(
        self,
        track: Track,
        destination: Union[str, Path],
        progress: Optional[ProgressSink] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> DownloadResult:
        """
        Resolves ``track`` and streams it to ``destination``.

        Raises:
            TrackUnavailableError: If the track is blocked or has no usable transcoding.
            ResolutionError: If no media URL could be recovered.
        """
        media_url = (await self.resolver.resolve(track)).unwrap()
        return await self.downloader.download(
            media_url, destination, progress=progress, cancel_event=cancel_event
        )

    async def close(self) -> None:
        await self.api.close()

    async def __aenter__(self) -> "SoundCloudClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
