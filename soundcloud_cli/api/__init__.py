"""
SoundCloud API Layer.

This package handles all communication with SoundCloud's api-v2 endpoints.
"""

from .client import SoundCloudAPIClient
from .client_id import ClientIdFetcher
from .playlists import PlaylistClient
from .rate_limiter import RequestThrottle
from .tracks import TrackClient

__all__ = [
    "ClientIdFetcher",
    "PlaylistClient",
    "RequestThrottle",
    "SoundCloudAPIClient",
    "TrackClient",
]
