"""
Batched track metadata fetching for playlists and albums.

api-v2 accepts at most 50 ids per ``/tracks`` request, so a collection's id
list is split into groups of 50 and fetched one group per pull.
"""

import asyncio
import logging
from typing import AsyncGenerator, List, Optional, Sequence, TypeVar

from pydantic import TypeAdapter, ValidationError

from soundcloud_cli.exceptions import ResolutionError
from soundcloud_cli.models.track import Batch, Track

log = logging.getLogger(__name__)

BATCH_SIZE = 50

T = TypeVar("T")

_TRACK_LIST = TypeAdapter(List[Track])


def slice_window(items: Sequence[T], offset: int = 0, limit: int = 0) -> List[T]:
    """Applies an offset/limit window. A limit of 0 means no limit."""
    if limit > 0:
        return list(items[offset : offset + limit])
    if offset > 0:
        return list(items[offset:])
    return list(items)


def chunk_ids(items: Sequence[T], size: int = BATCH_SIZE) -> List[List[T]]:
    """Splits ``items`` into consecutive groups of at most ``size``, keeping order."""
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class TrackBatchEnumerator:
    """
    Turns an ordered list of track ids into a lazy stream of ``Batch`` values.
    """

    def __init__(self, api_client):
        """
        Args:
            api_client: The SoundCloudAPIClient instance.
        """
        self.api_client = api_client

    async def iter_batches(
        self,
        track_ids: Sequence[int],
        offset: int = 0,
        limit: int = 0,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncGenerator[Batch, None]:
        """
        Yields one batch per group of ids, fetching each group only when the
        consumer asks for it.

        The generator is single-pass; iterating again means calling this
        method again, which re-fetches from the host. Setting ``cancel_event``
        ends the stream before the next group is requested.

        Raises:
            RetriesExhaustedError: If a group's request kept failing.
            ResolutionError: If a group's response is not a list of tracks.
        """
        window = slice_window(track_ids, offset, limit)
        groups = chunk_ids(window, BATCH_SIZE)
        log.debug(
            f"Enumerating {len(window)} tracks in {len(groups)} batches "
            f"(offset={offset}, limit={limit})."
        )

        for index, group in enumerate(groups):
            if cancel_event is not None and cancel_event.is_set():
                log.debug(f"Batch enumeration cancelled before batch {index}.")
                return

            payload = await self.api_client.fetch_tracks(
                group, offset=offset, limit=limit
            )
            try:
                items = _TRACK_LIST.validate_python(payload)
            except ValidationError as e:
                raise ResolutionError(
                    f"Unexpected payload for batch {index}: {e}"
                ) from e
            if len(items) != len(group):
                log.debug(
                    f"Batch {index}: requested {len(group)} tracks, "
                    f"host returned {len(items)}."
                )
            yield Batch(index=index, items=tuple(items))
