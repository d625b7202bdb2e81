"""
Shared test fixtures.

Provides:
- A local aiohttp server for exercising real HTTP round trips
- Track and transcoding factories
- A recording stand-in for the api-v2 client
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from soundcloud_cli.exceptions import RetriesExhaustedError
from soundcloud_cli.models.track import Track, Transcoding


# ---------------------------------------------------------------------------
#  Local HTTP server
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _serve(routes: List[web.RouteDef]):
    app = web.Application()
    app.add_routes(routes)
    server = TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture
def serve():
    """
    Returns an async context manager that runs an aiohttp app on localhost.

    Usage:
        async with serve([web.get("/x", handler)]) as server:
            url = str(server.make_url("/x"))
    """
    return _serve


# ---------------------------------------------------------------------------
#  Model factories
# ---------------------------------------------------------------------------


def transcoding(
    url: Optional[str] = "https://api-v2.soundcloud.com/media/1/stream",
    protocol: str = "progressive",
    mime_type: str = "audio/mpeg",
    quality: str = "sq",
) -> Transcoding:
    return Transcoding.model_validate(
        {
            "url": url,
            "preset": f"{protocol}_0_0",
            "quality": quality,
            "format": {"protocol": protocol, "mime_type": mime_type},
        }
    )


def track(
    track_id: int = 1,
    title: str = "Night Drive",
    username: str = "Some Producer",
    transcodings: Optional[List[Transcoding]] = None,
    policy: str = "ALLOW",
    duration: int = 215_000,
) -> Track:
    return Track.model_validate(
        {
            "id": track_id,
            "title": title,
            "duration": duration,
            "policy": policy,
            "user": {"id": 99, "username": username},
            "media": {
                "transcodings": [
                    t.model_dump() for t in (transcodings or [transcoding()])
                ]
            },
        }
    )


@pytest.fixture
def make_transcoding():
    return transcoding


@pytest.fixture
def make_track():
    return track


# ---------------------------------------------------------------------------
#  API stand-in
# ---------------------------------------------------------------------------


class RecordingAPI:
    """Answers api-v2 calls from memory and records every call made."""

    def __init__(
        self,
        resolve_payload: Optional[Dict[str, Any]] = None,
        fail_batches_after: Optional[int] = None,
    ):
        self.resolve_payload = resolve_payload or {}
        self.fail_batches_after = fail_batches_after
        self.resolve_calls: List[str] = []
        self.batch_calls: List[Dict[str, Any]] = []

    @property
    def total_calls(self) -> int:
        return len(self.resolve_calls) + len(self.batch_calls)

    async def resolve_url(self, url: str) -> Dict[str, Any]:
        self.resolve_calls.append(url)
        return self.resolve_payload

    async def fetch_tracks(
        self, track_ids: List[int], offset: int = 0, limit: int = 0
    ) -> List[Dict[str, Any]]:
        self.batch_calls.append(
            {"ids": list(track_ids), "offset": offset, "limit": limit}
        )
        if (
            self.fail_batches_after is not None
            and len(self.batch_calls) > self.fail_batches_after
        ):
            raise RetriesExhaustedError("GET /tracks failed after 3 attempts")
        return [{"id": tid, "title": f"Track {tid}"} for tid in track_ids]


@pytest.fixture
def recording_api():
    return RecordingAPI
