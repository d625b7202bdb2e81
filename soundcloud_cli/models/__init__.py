"""
Data Models Layer.

This package contains the Pydantic models for SoundCloud API documents and
configuration, plus the result types produced by resolution and downloading.
"""

from .config import ClientConfig, DownloadConfig
from .results import (
    DownloadResult,
    FailureKind,
    ResolutionFailure,
    ResolutionResult,
    ResolvedMedia,
    Unavailable,
)
from .stats import DownloadStats
from .track import (
    Batch,
    Media,
    Playlist,
    Track,
    TrackMediaInformation,
    Transcoding,
    TranscodingFormat,
    User,
)

__all__ = [
    "Batch",
    "ClientConfig",
    "DownloadConfig",
    "DownloadResult",
    "DownloadStats",
    "FailureKind",
    "Media",
    "Playlist",
    "ResolutionFailure",
    "ResolutionResult",
    "ResolvedMedia",
    "Track",
    "TrackMediaInformation",
    "Transcoding",
    "TranscodingFormat",
    "Unavailable",
    "User",
]
