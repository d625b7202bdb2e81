"""
Async HTTP client for the SoundCloud api-v2 endpoints and the CDN behind them.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, TypeVar

import aiohttp

from soundcloud_cli.exceptions import ResolutionError, RetriesExhaustedError
from soundcloud_cli.models.config import ClientConfig

from .rate_limiter import RequestThrottle

log = logging.getLogger(__name__)

API_BASE_URL = "https://api-v2.soundcloud.com"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})
_TRANSIENT_ERRORS = (
    aiohttp.ClientConnectionError,
    aiohttp.ClientPayloadError,
    asyncio.TimeoutError,
)

T = TypeVar("T")


class SoundCloudAPIClient:
    """
    Thin async client over a shared aiohttp session.

    Features:
    - client_id attached to every api-v2 and transcoding request
    - bounded retries with a fixed delay for transient failures
    - adaptive request spacing on 429 responses
    - connection pooling sized from ``max_workers``
    """

    def __init__(
        self,
        config: ClientConfig,
        api_base_url: str = API_BASE_URL,
    ):
        """
        Initializes the API client.

        Args:
            config: Immutable snapshot holding the client_id and retry policy.
            api_base_url: Root of the api-v2 endpoints.
        """
        self._config = config
        self.api_base_url = api_base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None
        self._throttle = RequestThrottle()

    @property
    def config(self) -> ClientConfig:
        return self._config

    def replace_config(self, config: ClientConfig) -> None:
        """
        Swaps in a new snapshot. Requests already in flight keep the snapshot
        they started with.
        """
        self._config = config

    def set_client_id(self, client_id: str) -> None:
        self.replace_config(self._config.with_client_id(client_id))

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            workers = self._config.max_workers
            connector = aiohttp.TCPConnector(
                limit=workers * 2,
                limit_per_host=workers,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"User-Agent": USER_AGENT},
                timeout=aiohttp.ClientTimeout(total=None, sock_connect=15, sock_read=60),
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "SoundCloudAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        url: str,
        read: Callable[[aiohttp.ClientResponse], Awaitable[T]],
        params: Optional[Dict[str, Any]] = None,
        with_client_id: bool = True,
    ) -> T:
        """
        Performs a request, retrying transient failures.

        Connection errors, timeouts, 429 and 5xx responses are retried up to
        ``max_attempts`` times with ``retry_delay`` seconds between attempts.
        Any other HTTP error is raised immediately as ``aiohttp.ClientResponseError``.

        Raises:
            RetriesExhaustedError: If every attempt failed transiently.
        """
        config = self._config
        query = dict(params or {})
        if with_client_id:
            query["client_id"] = config.client_id

        session = await self._initialize_session()
        last_exception: Optional[BaseException] = None

        for attempt in range(1, config.max_attempts + 1):
            try:
                await self._throttle.acquire()
                async with session.request(
                    method, url, params=query, allow_redirects=True
                ) as response:
                    if response.status == 429:
                        await self._throttle.on_429()
                    response.raise_for_status()
                    return await read(response)
            except aiohttp.ClientResponseError as e:
                if e.status not in RETRYABLE_STATUSES:
                    raise
                last_exception = e
            except _TRANSIENT_ERRORS as e:
                last_exception = e

            log.debug(
                f"{method} {url} attempt {attempt}/{config.max_attempts} failed: "
                f"{last_exception!r}"
            )
            if attempt < config.max_attempts:
                await asyncio.sleep(config.retry_delay)

        raise RetriesExhaustedError(
            f"{method} {url} failed after {config.max_attempts} attempts: "
            f"{last_exception}"
        ) from last_exception

    async def get_text(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        with_client_id: bool = True,
    ) -> str:
        async def read(response: aiohttp.ClientResponse) -> str:
            return await response.text()

        return await self._request("GET", url, read, params, with_client_id)

    async def get_json(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Fetches and decodes a JSON document, whatever content type it is served with."""
        text = await self.get_text(url, params)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ResolutionError(f"Invalid JSON from {url}: {e}") from e

    async def get_file_size(self, url: str) -> int:
        """
        Probes the size of a media file with a HEAD request.

        Returns 0 when the server does not report a Content-Length.
        """

        async def read(response: aiohttp.ClientResponse) -> int:
            return int(response.headers.get("Content-Length", 0) or 0)

        return await self._request("HEAD", url, read, with_client_id=False)

    @asynccontextmanager
    async def open_stream(self, url: str) -> AsyncIterator[aiohttp.ClientResponse]:
        """Opens a raw byte stream against a media URL. Not retried."""
        session = await self._initialize_session()
        async with session.get(url, allow_redirects=True) as response:
            response.raise_for_status()
            yield response

    # Public API Methods
    async def resolve_url(self, soundcloud_url: str) -> Dict[str, Any]:
        return await self.get_json(
            f"{self.api_base_url}/resolve", params={"url": soundcloud_url}
        )

    async def fetch_track(self, track_id: int) -> Dict[str, Any]:
        return await self.get_json(f"{self.api_base_url}/tracks/{track_id}")

    async def fetch_tracks(
        self, track_ids: list[int], offset: int = 0, limit: int = 0
    ) -> Any:
        return await self.get_json(
            f"{self.api_base_url}/tracks",
            params={
                "ids": ",".join(str(tid) for tid in track_ids),
                "limit": limit,
                "offset": offset,
            },
        )
