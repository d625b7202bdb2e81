"""
Utilities for handling file paths, templates, and URL parsing.
"""

import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from pathvalidate import sanitize_filename, sanitize_filepath

from soundcloud_cli.models.track import Track

_PLAYLIST_PATTERN = re.compile(r"soundcloud\..+?/(.*?)/sets/[a-zA-Z]+")
_TRACK_PATTERN = re.compile(
    r"soundcloud\..+?/(.*?)/[a-zA-Z0-9~@#$^*()_+=\[\]{}|\\,.?: -]+"
)


def _is_absolute_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_playlist_url(url: str) -> bool:
    """Checks for a playlist or album (``/sets/``) URL."""
    url = url.strip().lower()
    return _is_absolute_url(url) and bool(_PLAYLIST_PATTERN.search(url))


def is_track_url(url: str) -> bool:
    """Checks for a single-track URL. Playlist URLs are not track URLs."""
    url = url.strip().lower()
    return (
        _is_absolute_url(url)
        and not _PLAYLIST_PATTERN.search(url)
        and bool(_TRACK_PATTERN.search(url))
    )


def parse_soundcloud_url(url: str) -> Optional[Tuple[str, str]]:
    """
    Classifies a SoundCloud URL.

    Returns:
        ``("playlist", url)`` or ``("track", url)``, or None if the URL matches neither.
    """
    url = url.strip()
    if is_playlist_url(url):
        return "playlist", url
    if is_track_url(url):
        return "track", url
    return None


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def sanitize_dirname(name: str, fallback: str = "Untitled") -> Path:
    return Path(sanitize_filename(name.strip(), platform="auto") or fallback)


class PathFormatter:
    """
    Formats an output path template string using track metadata.
    """

    def __init__(self, template: str) -> None:
        self.template = template

    def format_path(self, track: Track, file_extension: str) -> Path:
        """
        Generates a final, sanitized file path from the template.
        """
        template_vars = self._get_template_vars(track, file_extension)
        final_str = self.template.format(**template_vars)
        return Path(sanitize_filepath(final_str, platform="auto"))

    def _get_template_vars(self, track: Track, ext: str) -> Dict[str, Any]:
        return {
            "artist": sanitize_filename(track.artist) or "Unknown Artist",
            "title": sanitize_filename(track.title) or str(track.id),
            "track_id": str(track.id),
            "ext": ext,
        }
