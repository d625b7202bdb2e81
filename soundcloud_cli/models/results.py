"""
Result variants produced by stream resolution and downloading.

Resolution returns one of ``ResolvedMedia``, ``Unavailable`` or
``ResolutionFailure`` instead of raising, so callers have to branch on the
unavailable and failed cases explicitly. ``unwrap()`` converts a result back
into the exception style for callers that only want the URL.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from soundcloud_cli.exceptions import (
    ResolutionError,
    RetriesExhaustedError,
    TrackUnavailableError,
)

from .track import Transcoding


class FailureKind(Enum):
    """Why a resolution produced no media URL."""

    UNPARSABLE = "unparsable"
    EMPTY_MANIFEST = "empty_manifest"
    HTTP_ERROR = "http_error"
    RETRIES_EXHAUSTED = "retries_exhausted"


@dataclass(frozen=True)
class ResolvedMedia:
    url: str
    transcoding: Transcoding
    from_manifest: bool = False

    ok = True

    def unwrap(self) -> str:
        return self.url


@dataclass(frozen=True)
class Unavailable:
    reason: str

    ok = False

    def __str__(self) -> str:
        return f"unavailable: {self.reason}"

    def unwrap(self) -> str:
        raise TrackUnavailableError(self.reason)


@dataclass(frozen=True)
class ResolutionFailure:
    kind: FailureKind
    detail: str = ""

    ok = False

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}" if self.detail else self.kind.value

    def unwrap(self) -> str:
        if self.kind is FailureKind.RETRIES_EXHAUSTED:
            raise RetriesExhaustedError(self.detail)
        raise ResolutionError(str(self))


ResolutionResult = Union[ResolvedMedia, Unavailable, ResolutionFailure]


@dataclass(frozen=True)
class DownloadResult:
    """Outcome of a single streamed download."""

    path: Path
    bytes_written: int
    total_size: int
    cancelled: bool = False

    @property
    def completed(self) -> bool:
        return not self.cancelled

    @property
    def size_mismatch(self) -> Optional[int]:
        """Difference between bytes written and the probed size, when known."""
        if self.total_size <= 0 or self.cancelled:
            return None
        return self.bytes_written - self.total_size
