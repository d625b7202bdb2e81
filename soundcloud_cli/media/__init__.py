"""
Media Processing Layer.

This package turns track metadata into bytes on disk: transcoding selection,
stream location resolution (including HLS playlist rewriting) and downloading.
"""

from .downloader import CHUNK_SIZE, Downloader
from .manifest import ManifestRewriter, rewrite_manifest
from .resolver import StreamLocationResolver
from .selector import file_extension, select_transcoding

__all__ = [
    "CHUNK_SIZE",
    "Downloader",
    "ManifestRewriter",
    "StreamLocationResolver",
    "file_extension",
    "rewrite_manifest",
    "select_transcoding",
]
