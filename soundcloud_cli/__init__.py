"""
soundcloud-cli: resolve and download SoundCloud tracks and playlists.
"""

__version__ = "0.1.0"

from .client import SoundCloudClient

__all__ = ["SoundCloudClient", "__version__"]
