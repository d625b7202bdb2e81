"""
The main orchestrator for handling URLs, fetching metadata, and managing the download queue.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import aiohttp
from rich.markup import escape

from soundcloud_cli.cli.progress_manager import ProgressManager
from soundcloud_cli.client import SoundCloudClient
from soundcloud_cli.exceptions import SoundCloudCliError
from soundcloud_cli.models.config import DownloadConfig
from soundcloud_cli.models.stats import DownloadStats
from soundcloud_cli.models.track import Track
from soundcloud_cli.utils.path import create_dir, parse_soundcloud_url, sanitize_dirname
from soundcloud_cli.utils.playlist import generate_m3u

from .track_processor import TrackProcessor

log = logging.getLogger(__name__)


class DownloadManager:
    """Orchestrates the entire download process."""

    def __init__(
        self,
        config: DownloadConfig,
        client: SoundCloudClient,
        progress_manager: ProgressManager,
    ):
        self.config = config
        self.client = client
        self.progress_manager = progress_manager
        self.stats = DownloadStats()
        self.cancel_event = asyncio.Event()
        self.output_dir = Path(config.output_dir)
        self.track_processor = TrackProcessor(
            config,
            self.stats,
            client.resolver,
            client.downloader,
            progress_manager,
            self.cancel_event,
        )
        self.semaphore = asyncio.Semaphore(config.max_workers)
        self._processed_urls: set[str] = set()
        self._processed_lock = asyncio.Lock()

    def cancel(self) -> None:
        """Stops the session at the next chunk or batch boundary."""
        if not self.cancel_event.is_set():
            log.warning("[yellow]Cancelling... finishing current chunk.[/yellow]")
            self.cancel_event.set()

    def expand_sources(self) -> List[str]:
        """Reads URL list files and removes duplicates, keeping first-seen order."""
        expanded_urls = []
        for source in self.config.source_urls:
            if Path(source).is_file():
                log.info(f"Reading URLs from file: [dim]{source}[/dim]")
                try:
                    with open(source, "r", encoding="utf-8") as f:
                        expanded_urls.extend(
                            line.strip()
                            for line in f
                            if line.strip() and not line.startswith("#")
                        )
                except (IOError, UnicodeDecodeError) as e:
                    log.error(f"[red]Could not read file {source}: {e}[/red]")
            else:
                expanded_urls.append(source)

        unique_urls = list(dict.fromkeys(expanded_urls))
        if len(unique_urls) < len(expanded_urls):
            log.info(f"Removed {len(expanded_urls) - len(unique_urls)} duplicate URLs.")
        return unique_urls

    async def execute_downloads(self) -> None:
        """Processes all URLs from the config and executes downloads."""
        urls = self.expand_sources()
        if not urls:
            log.warning("[yellow]No URLs to process. Exiting.[/yellow]")
            return

        await asyncio.gather(*(self._process_url(url) for url in urls))

    async def _process_url(self, url: str) -> None:
        """Routes a single URL to the appropriate handler."""
        url_info = parse_soundcloud_url(url)
        if not url_info:
            log.error(f"[red]Invalid or unsupported URL: {escape(url)}[/red]")
            return

        async with self._processed_lock:
            if url in self._processed_urls:
                return
            self._processed_urls.add(url)

        url_type, _ = url_info
        handler = self._process_playlist if url_type == "playlist" else self._process_track
        try:
            await handler(url)
        except SoundCloudCliError as e:
            log.error(f"[red]✗ {escape(url)}: {e}[/red]")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error(f"[red]✗ Network error for {escape(url)}: {e}[/red]")

    async def _process_track(self, url: str) -> None:
        track = await self.client.tracks.get(url)
        self.progress_manager.add_to_total(1)
        self.progress_manager.log_message(
            f"\n[bold cyan]▶ Track:[/] {escape(track.artist)} - {escape(track.title)}"
        )
        await self._download_track(track, self.output_dir)

    async def _process_playlist(self, url: str) -> None:
        """Downloads a playlist batch by batch, starting work before all metadata is in."""
        playlist = await self.client.playlists.get(url, populate_all_tracks=False)
        playlist_dir = self.output_dir / sanitize_dirname(
            playlist.title, fallback=f"playlist_{playlist.id}"
        )
        create_dir(playlist_dir)
        self.stats.playlists_processed.add(str(playlist.id))

        kind = "Album" if playlist.set_type == "album" else "Playlist"
        self.progress_manager.log_message(
            f"\n[bold green]🎵 {kind}:[/] {escape(playlist.title)} "
            f"[dim]({len(playlist.track_ids)} tracks)[/dim]"
        )

        saved: List[Tuple[Track, Optional[Path]]] = []
        async for batch in self.client.playlists.iter_batches(
            playlist, self.config.offset, self.config.limit, self.cancel_event
        ):
            self.progress_manager.add_to_total(len(batch))
            paths = await asyncio.gather(
                *(self._download_track(track, playlist_dir) for track in batch)
            )
            saved.extend(zip(batch, paths))

        if not self.config.no_m3u:
            generate_m3u(playlist_dir, [(t, p) for t, p in saved if p is not None])

    async def _download_track(self, track: Track, output_dir: Path) -> Optional[Path]:
        async with self.semaphore:
            if self.cancel_event.is_set():
                self.stats.tracks_cancelled += 1
                self.progress_manager.increment_cancelled()
                return None
            try:
                return await self.track_processor.process_track(track, output_dir)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                self.stats.tracks_failed += 1
                self.progress_manager.increment_failed()
                log.error(
                    f"[red]  ✗ Network error for track '{escape(track.title)}': {e}[/red]"
                )
                return None
