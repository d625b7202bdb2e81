"""
Utility for generating M3U playlist files.
"""

import logging
from pathlib import Path
from typing import Iterable, Tuple

from soundcloud_cli.models.track import Track

from .formatting import get_display_title

log = logging.getLogger(__name__)


def generate_m3u(
    playlist_directory: Path, entries: Iterable[Tuple[Track, Path]]
) -> bool:
    """
    Writes ``<directory name>.m3u`` listing downloaded tracks in playlist order.

    Args:
        playlist_directory: Folder the playlist's tracks were saved into.
        entries: ``(track, saved_path)`` pairs, in playlist order.
    """
    playlist_path = playlist_directory / f"{playlist_directory.name}.m3u"

    content = ["#EXTM3U"]
    for track, audio_path in entries:
        length = track.duration // 1000 if track.duration else -1
        content.append(f"#EXTINF:{length},{get_display_title(track)}")
        try:
            content.append(audio_path.relative_to(playlist_directory).as_posix())
        except ValueError:
            content.append(audio_path.as_posix())

    if len(content) == 1:
        log.debug(f"No tracks were saved to '{playlist_directory}', skipping playlist.")
        return False

    try:
        with open(playlist_path, "w", encoding="utf-8") as f:
            f.write("\n".join(content))
        log.info(f"Generated playlist: '{playlist_path}'")
        return True
    except IOError as e:
        log.error(f"Failed to write playlist file: {e}")
        return False
