"""
Pydantic models for the SoundCloud api-v2 JSON documents consumed by the client.
Only the fields the resolution pipeline needs are declared; everything else is ignored.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _HostModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class TranscodingFormat(_HostModel):
    protocol: str = ""
    mime_type: str = ""


class Transcoding(_HostModel):
    """
    One alternative encoding of a track.

    ``url`` only locates a second-stage JSON document holding the media URL;
    it never serves media bytes itself.
    """

    url: Optional[str] = None
    preset: str = ""
    quality: str = ""
    format: Optional[TranscodingFormat] = None
    snipped: bool = False


class Media(_HostModel):
    transcodings: List[Transcoding] = Field(default_factory=list)


class User(_HostModel):
    id: Optional[int] = None
    username: str = "Unknown Artist"
    permalink_url: Optional[str] = None


class Track(_HostModel):
    id: int
    title: str = "Unknown Title"
    permalink_url: Optional[str] = None
    duration: int = 0  # milliseconds
    policy: Optional[str] = None
    media: Optional[Media] = None
    user: Optional[User] = None

    @property
    def transcodings(self) -> List[Transcoding]:
        if self.media is None:
            return []
        return self.media.transcodings

    @property
    def is_blocked(self) -> bool:
        return (self.policy or "").lower() == "block"

    @property
    def artist(self) -> str:
        return self.user.username if self.user else "Unknown Artist"


class Playlist(_HostModel):
    """A playlist or album. Albums are playlists with ``set_type == "album"``."""

    id: int
    title: str = "Unknown Playlist"
    permalink_url: Optional[str] = None
    set_type: Optional[str] = None
    track_count: int = 0
    # Entries past the first few carry only an id until fetched in batches.
    tracks: List[Track] = Field(default_factory=list)

    @property
    def track_ids(self) -> List[int]:
        return [t.id for t in self.tracks]


class TrackMediaInformation(_HostModel):
    """Second-stage document returned by a transcoding endpoint."""

    url: Optional[str] = None


@dataclass(frozen=True)
class Batch:
    """One page of fully populated tracks, matching one group of requested ids."""

    index: int
    items: tuple[Track, ...]

    def __iter__(self) -> Iterator[Track]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
