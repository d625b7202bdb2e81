"""
Handles the processing of a single track, from stream resolution to the saved file.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from rich.markup import escape

from soundcloud_cli.cli.progress_manager import ProgressManager
from soundcloud_cli.exceptions import DownloadError, SizeProbeError
from soundcloud_cli.media import (
    Downloader,
    StreamLocationResolver,
    file_extension,
    select_transcoding,
)
from soundcloud_cli.models.config import DownloadConfig
from soundcloud_cli.models.results import ResolutionFailure, Unavailable
from soundcloud_cli.models.stats import DownloadStats
from soundcloud_cli.models.track import Track
from soundcloud_cli.utils.formatting import get_display_title
from soundcloud_cli.utils.path import PathFormatter

log = logging.getLogger(__name__)


class TrackProcessor:
    """
    Orchestrates the resolution and download of a single track.
    """

    def __init__(
        self,
        config: DownloadConfig,
        stats: DownloadStats,
        resolver: StreamLocationResolver,
        downloader: Downloader,
        progress_manager: ProgressManager,
        cancel_event: asyncio.Event,
    ):
        self.config = config
        self.stats = stats
        self.resolver = resolver
        self.downloader = downloader
        self.progress_manager = progress_manager
        self.cancel_event = cancel_event
        self.path_formatter = PathFormatter(config.output_template)

    def target_path(self, track: Track, output_dir: Path) -> Path:
        transcoding = select_transcoding(track.transcodings)
        ext = file_extension(transcoding) if transcoding else "mp3"
        return output_dir / self.path_formatter.format_path(track, ext)

    async def process_track(self, track: Track, output_dir: Path) -> Optional[Path]:
        """
        Manages the complete lifecycle of downloading and saving a track.

        Returns:
            The saved (or already existing) file path, or None if the track was
            unavailable, failed, or was cancelled.
        """
        final_path = self.target_path(track, output_dir)
        display_title = escape(get_display_title(track))

        if final_path.is_file():
            self.stats.tracks_skipped_exists += 1
            self.progress_manager.increment_skipped()
            log.info(
                f"  [yellow]○ Skipping:[/] [dim]{escape(final_path.name)}[/dim] (already exists)"
            )
            return final_path

        result = await self.resolver.resolve(track)
        if isinstance(result, Unavailable):
            self.stats.tracks_unavailable += 1
            self.progress_manager.increment_skipped()
            log.warning(f"  [yellow]⚠ Unavailable:[/] {display_title} ({result.reason})")
            return None
        if isinstance(result, ResolutionFailure):
            self.stats.tracks_failed += 1
            self.progress_manager.increment_failed()
            log.error(
                f"  [red]✗ Failed:[/] {display_title} "
                f"(no media URL: {result.kind.value})"
            )
            return None

        temp_path = final_path.with_suffix(f".{track.id}.tmp")
        task_id = self.progress_manager.add_track_task(display_title)
        try:
            outcome = await self.downloader.download(
                result.url,
                temp_path,
                progress=self.progress_manager.progress_sink(task_id),
                cancel_event=self.cancel_event,
            )
            if outcome.cancelled:
                self.stats.tracks_cancelled += 1
                self.progress_manager.cancel_task(task_id)
                return None

            await asyncio.to_thread(os.replace, temp_path, final_path)
            if outcome.size_mismatch:
                log.debug(
                    f"'{final_path.name}': wrote {outcome.bytes_written} bytes, "
                    f"probe reported {outcome.total_size}."
                )
            self.stats.tracks_downloaded += 1
            self.stats.total_size_downloaded += outcome.bytes_written
            self.progress_manager.remove_task(task_id, success=True)
            return final_path

        except (SizeProbeError, DownloadError, OSError) as e:
            self.stats.tracks_failed += 1
            self.progress_manager.remove_task(task_id, success=False)
            log.error(
                f"  [red]✗ Failed:[/] {display_title} ({e})",
                exc_info=log.getEffectiveLevel() == logging.DEBUG,
            )
            return None
        finally:
            # Partial output of failed or cancelled transfers is discarded here.
            if temp_path.exists():
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
