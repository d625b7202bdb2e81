"""
Operations related to SoundCloud tracks.
"""

import logging

from pydantic import ValidationError

from soundcloud_cli.exceptions import InvalidInputError, ResolutionError
from soundcloud_cli.models.track import Track
from soundcloud_cli.utils.path import is_track_url

from .client import SoundCloudAPIClient

log = logging.getLogger(__name__)


class TrackClient:
    def __init__(self, api_client: SoundCloudAPIClient):
        self.api_client = api_client

    @staticmethod
    def is_url_valid(url: str) -> bool:
        return is_track_url(url)

    async def get(self, url: str) -> Track:
        """
        Resolves a track page URL into its metadata.

        Raises:
            InvalidInputError: If ``url`` is not a track URL. No request is made.
            ResolutionError: If the host returns a document that is not a track.
        """
        if not self.is_url_valid(url):
            raise InvalidInputError(f"Invalid track url: {url}")

        payload = await self.api_client.resolve_url(url)
        return self._parse(payload, url)

    async def get_by_id(self, track_id: int) -> Track:
        payload = await self.api_client.fetch_track(track_id)
        return self._parse(payload, f"track {track_id}")

    @staticmethod
    def _parse(payload, source: str) -> Track:
        try:
            return Track.model_validate(payload)
        except ValidationError as e:
            raise ResolutionError(f"Unexpected track payload for {source}: {e}") from e
