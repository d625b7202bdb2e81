"""
Tests for recovering a direct media URL from an HLS playlist body.
"""

from soundcloud_cli.media.manifest import is_manifest_url, rewrite_manifest

PLAYLIST = (
    "#EXTM3U\n"
    "#EXT-X-VERSION:6\n"
    "#EXT-X-TARGETDURATION:10\n"
    "#EXTINF:9.952,\n"
    "https://cf-hls-media.sndcdn.com/media/0/159334/AbCd.128.mp3?Policy=x\n"
    "#EXTINF:9.952,\n"
    "https://cf-hls-media.sndcdn.com/media/159334/318669/AbCd.128.mp3?Policy=y\n"
    "#EXT-X-ENDLIST\n"
)


class TestRewriteManifest:
    def test_rewrites_last_entry_to_segment_zero(self):
        assert rewrite_manifest(PLAYLIST) == (
            "https://cf-hls-media.sndcdn.com/media/0/318669/AbCd.128.mp3?Policy=y"
        )

    def test_empty_body(self):
        assert rewrite_manifest("") is None
        assert rewrite_manifest("   \n") is None

    def test_entry_without_media_component_is_kept(self):
        body = "#EXTM3U\n#EXTINF:5.0,\nhttps://cdn.example.com/a/b.mp3\n"

        assert rewrite_manifest(body) == "https://cdn.example.com/a/b.mp3"


def test_is_manifest_url():
    assert is_manifest_url("https://cf-hls-media.sndcdn.com/playlist/x.128.mp3/playlist.m3u8")
    assert not is_manifest_url("https://cf-media.sndcdn.com/x.128.mp3")
