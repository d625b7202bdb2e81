"""
Tests for streaming media to disk, including progress reporting,
cooperative cancellation and size-probe failures.
"""

import asyncio

import pytest
from aiohttp import web

from soundcloud_cli.api.client import SoundCloudAPIClient
from soundcloud_cli.client import SoundCloudClient
from soundcloud_cli.exceptions import SizeProbeError, TrackUnavailableError
from soundcloud_cli.media.downloader import Downloader
from soundcloud_cli.models.config import ClientConfig

PAYLOAD = bytes(range(256)) * 200  # 51,200 bytes
CONFIG = ClientConfig(client_id="test-client", max_attempts=1, retry_delay=0)


async def _media(request: web.Request) -> web.Response:
    return web.Response(body=PAYLOAD, content_type="audio/mpeg")


async def _short_head(request: web.Request) -> web.Response:
    response = web.Response(body=b"\0" * 1000, content_type="audio/mpeg")
    response.force_close()
    return response


async def _unsized_head(request: web.Request) -> web.StreamResponse:
    response = web.StreamResponse()
    response.force_close()
    await response.prepare(request)
    return response


async def _chunked_media(request: web.Request) -> web.StreamResponse:
    response = web.StreamResponse()
    response.content_type = "audio/mpeg"
    response.enable_chunked_encoding()
    await response.prepare(request)
    for start in range(0, len(PAYLOAD), 8_000):
        await response.write(PAYLOAD[start : start + 8_000])
    await response.write_eof()
    return response


def _run_download(
    serve, destination, path="/media.mp3", cancel_after=None, routes=None
):
    routes = routes or [web.get("/media.mp3", _media)]
    fractions = []
    cancel_event = asyncio.Event() if cancel_after is not None else None

    def progress(fraction: float) -> None:
        fractions.append(fraction)
        if cancel_event is not None and len(fractions) >= cancel_after:
            cancel_event.set()

    async def run():
        async with serve(routes) as server:
            async with SoundCloudAPIClient(CONFIG) as api:
                downloader = Downloader(api, chunk_size=10_000)
                return await downloader.download(
                    str(server.make_url(path)),
                    destination,
                    progress=progress,
                    cancel_event=cancel_event,
                )

    return asyncio.run(run()), fractions


class TestDownload:
    def test_writes_every_byte(self, serve, tmp_path):
        destination = tmp_path / "nested" / "track.mp3"

        result, fractions = _run_download(serve, destination)

        assert result.completed
        assert result.bytes_written == len(PAYLOAD)
        assert result.total_size == len(PAYLOAD)
        assert not result.size_mismatch
        assert destination.read_bytes() == PAYLOAD

    def test_progress_is_monotonic_and_ends_at_one(self, serve, tmp_path):
        _, fractions = _run_download(serve, tmp_path / "track.mp3")

        assert len(fractions) >= 2
        assert fractions == sorted(fractions)
        assert all(0.0 <= f <= 1.0 for f in fractions)
        assert fractions[-1] == 1.0

    def test_existing_file_is_truncated(self, serve, tmp_path):
        destination = tmp_path / "track.mp3"
        destination.write_bytes(b"x" * (len(PAYLOAD) * 2))

        _run_download(serve, destination)

        assert destination.read_bytes() == PAYLOAD

    def test_cancellation_stops_before_next_read(self, serve, tmp_path):
        destination = tmp_path / "track.mp3"

        result, fractions = _run_download(serve, destination, cancel_after=1)

        assert result.cancelled
        assert not result.completed
        assert len(fractions) == 1
        assert 0 < result.bytes_written < len(PAYLOAD)
        assert destination.stat().st_size == result.bytes_written

    def test_probe_failure_creates_no_file(self, serve, tmp_path):
        destination = tmp_path / "missing.mp3"

        with pytest.raises(SizeProbeError):
            _run_download(serve, destination, path="/does-not-exist.mp3")

        assert not destination.exists()

    def test_stream_longer_than_probed_size(self, serve, tmp_path):
        destination = tmp_path / "track.mp3"
        routes = [
            web.head("/media.mp3", _short_head),
            web.get("/media.mp3", _media, allow_head=False),
        ]

        result, fractions = _run_download(serve, destination, routes=routes)

        assert all(0.0 <= f <= 1.0 for f in fractions)
        assert fractions[-1] == 1.0
        assert result.completed
        assert result.total_size == 1000
        assert result.bytes_written == len(PAYLOAD)
        assert result.size_mismatch == len(PAYLOAD) - 1000
        assert destination.stat().st_size == result.bytes_written

    def test_unknown_size_reports_zero_until_done(self, serve, tmp_path):
        destination = tmp_path / "track.mp3"
        routes = [
            web.head("/media.mp3", _unsized_head),
            web.get("/media.mp3", _chunked_media, allow_head=False),
        ]

        result, fractions = _run_download(serve, destination, routes=routes)

        assert result.total_size == 0
        assert result.size_mismatch is None
        assert len(fractions) >= 2
        assert set(fractions[:-1]) == {0.0}
        assert fractions[-1] == 1.0
        assert destination.read_bytes() == PAYLOAD
        assert destination.stat().st_size == result.bytes_written


class TestClientDownload:
    def test_unavailable_track_raises(self, make_track, tmp_path):
        async def run():
            async with SoundCloudClient(CONFIG) as client:
                await client.download(make_track(policy="BLOCK"), tmp_path / "x.mp3")

        with pytest.raises(TrackUnavailableError):
            asyncio.run(run())

        assert not (tmp_path / "x.mp3").exists()
