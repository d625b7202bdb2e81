"""
Handles the low-level streaming of media files over HTTP to disk with progress reporting.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Union

import aiofiles
import aiohttp

from soundcloud_cli.exceptions import (
    DownloadError,
    RetriesExhaustedError,
    SizeProbeError,
)
from soundcloud_cli.models.results import DownloadResult
from soundcloud_cli.utils.path import create_dir

log = logging.getLogger(__name__)

CHUNK_SIZE = 10_000

ProgressSink = Callable[[float], None]


class Downloader:
    """Streams a resolved media URL into a file."""

    def __init__(self, api_client, chunk_size: int = CHUNK_SIZE):
        """
        Args:
            api_client: The SoundCloudAPIClient whose session is used for transfers.
            chunk_size: Bytes requested per read.
        """
        self.api_client = api_client
        self.chunk_size = chunk_size

    async def probe_size(self, url: str) -> int:
        try:
            return await self.api_client.get_file_size(url)
        except (aiohttp.ClientError, RetriesExhaustedError) as e:
            raise SizeProbeError(f"Could not determine the size of {url}: {e}") from e

    async def download(
        self,
        url: str,
        destination: Union[str, Path],
        progress: Optional[ProgressSink] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> DownloadResult:
        """
        Downloads ``url`` to ``destination``, truncating any existing file.

        ``progress`` receives the written fraction of the probed size after
        every chunk and 1.0 once the stream is exhausted. When
        ``cancel_event`` is set the transfer stops before the next read and
        returns a cancelled result; the partial file is left in place.

        Raises:
            SizeProbeError: If the size probe fails. No file is created.
            DownloadError: If the stream cannot be opened or breaks off.
            OSError: If the destination cannot be created or written.
        """
        destination = Path(destination)
        total_size = await self.probe_size(url)
        log.debug(f"Downloading {url} ({total_size} bytes) to '{destination}'")

        try:
            async with self.api_client.open_stream(url) as response:
                return await self._write_stream(
                    response, destination, total_size, progress, cancel_event
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(
                f"Transfer of '{destination.name}' was interrupted: {e}"
            ) from e

    async def _write_stream(
        self,
        response: aiohttp.ClientResponse,
        destination: Path,
        total_size: int,
        progress: Optional[ProgressSink],
        cancel_event: Optional[asyncio.Event],
    ) -> DownloadResult:
        await asyncio.to_thread(create_dir, destination.parent)

        bytes_written = 0
        async with aiofiles.open(destination, "wb") as f:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    log.debug(
                        f"Download of '{destination.name}' cancelled after "
                        f"{bytes_written} bytes."
                    )
                    return DownloadResult(
                        destination, bytes_written, total_size, cancelled=True
                    )

                chunk = await response.content.read(self.chunk_size)
                if not chunk:
                    break

                await f.write(chunk)
                bytes_written += len(chunk)

                if progress is not None:
                    progress(
                        min(bytes_written / total_size, 1.0) if total_size > 0 else 0.0
                    )

        if progress is not None:
            progress(1.0)
        return DownloadResult(destination, bytes_written, total_size)
