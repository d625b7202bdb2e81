"""
Dataclass for tracking download session statistics.
"""

import time
from dataclasses import dataclass, field


@dataclass
class DownloadStats:
    """Tracks statistics for a download session."""

    tracks_downloaded: int = 0
    tracks_skipped_exists: int = 0
    tracks_unavailable: int = 0
    tracks_failed: int = 0
    tracks_cancelled: int = 0
    total_size_downloaded: int = 0
    playlists_processed: set[str] = field(default_factory=set)
    started_at: float = field(default_factory=time.monotonic, repr=False)

    @property
    def tracks_total(self) -> int:
        return (
            self.tracks_downloaded
            + self.tracks_skipped_exists
            + self.tracks_unavailable
            + self.tracks_failed
            + self.tracks_cancelled
        )

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at
