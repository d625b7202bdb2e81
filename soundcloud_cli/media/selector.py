"""
Picks the transcoding a track should be downloaded from.
"""

from typing import Iterable, Optional

from soundcloud_cli.models.track import Transcoding

STANDARD_QUALITY = "sq"
PROGRESSIVE = "progressive"
SEGMENTED = "hls"


def _matches(
    transcoding: Transcoding, protocol: str, mime_fragment: str
) -> bool:
    fmt = transcoding.format
    return (
        transcoding.quality == STANDARD_QUALITY
        and fmt is not None
        and fmt.protocol == protocol
        and mime_fragment in fmt.mime_type
    )


def select_transcoding(
    transcodings: Iterable[Transcoding],
) -> Optional[Transcoding]:
    """
    Chooses a transcoding by priority: standard-quality progressive MPEG first,
    then standard-quality HLS Ogg. The first entry in input order wins within
    each rule. Returns None when neither rule matches.
    """
    candidates = list(transcodings)
    for protocol, mime_fragment in (
        (PROGRESSIVE, "audio/mpeg"),
        (SEGMENTED, "ogg"),
    ):
        for transcoding in candidates:
            if _matches(transcoding, protocol, mime_fragment):
                return transcoding
    return None


def file_extension(transcoding: Transcoding) -> str:
    """File extension for media served by ``transcoding``."""
    mime = transcoding.format.mime_type if transcoding.format else ""
    if "opus" in mime:
        return "opus"
    if "ogg" in mime:
        return "ogg"
    return "mp3"
