"""
Unit tests for the list-page and camera-page parsers
"""

import pytest

from common.types import CameraSummary, ParsedDetail
from discovery.parsers import parse_camera_detail, parse_camera_list

SNAPSHOT_BASE = "https://c01.twipcam.com/cam/snapshot/"


class TestParseCameraList:
    """Test cases for parse_camera_list"""

    def test_skips_container_without_image(self, list_html):
        """Two valid containers, the image-less one is dropped silently"""
        cams = parse_camera_list(list_html)

        assert [c.id for c in cams] == ["A1", "B2"]
        assert all(isinstance(c, CameraSummary) for c in cams)

    def test_fields_from_list_page(self, list_html):
        """Snapshot from src, live feed from data-src, names from captions"""
        a1, b2 = parse_camera_list(list_html)

        assert a1.snapshot_url == "s1.jpg"
        assert a1.live_feed_url == ""
        assert a1.name == "中正四路 距離120公尺"

        assert b2.live_feed_url == "live2"
        assert b2.snapshot_url == f"{SNAPSHOT_BASE}B2.jpg"
        assert b2.name == "B2"

    def test_mixed_containers(self, mixed_list_html):
        """Absolute hrefs, empty src, blank captions, non-camera links and duplicates"""
        cams = parse_camera_list(mixed_list_html)

        assert [c.id for c in cams] == ["K-9", "A1"]
        k9 = cams[0]
        assert k9.name == "K-9"
        assert k9.snapshot_url == f"{SNAPSHOT_BASE}K-9.jpg"
        assert k9.live_feed_url == "https://live.example/k9.mjpg"
        assert cams[1].snapshot_url == "s1-again.jpg"

    def test_custom_snapshot_base(self):
        """Fallback snapshot URL follows the configured base"""
        html = '<div class="cam-list-container"><a href="/cam/Z1"><img></a></div>'
        (cam,) = parse_camera_list(html, snapshot_base="https://snap.example/")
        assert cam.snapshot_url == "https://snap.example/Z1.jpg"

    def test_duplicates_are_kept_in_order(self):
        """De-duplication is the cache's job, not the parser's"""
        item = '<div class="cam-list-container"><a href="/cam/D4"><img src="d.jpg"></a></div>'
        cams = parse_camera_list(item * 3)
        assert [c.id for c in cams] == ["D4", "D4", "D4"]

    @pytest.mark.parametrize(
        "href",
        [
            "/cam/A1?ref=list",
            "/cam/A1/",
            "/cam/A1#player",
            "https://www.twipcam.com/cam/A1/?utm_source=x",
        ],
    )
    def test_id_ignores_query_fragment_and_trailing_slash(self, href):
        html = f'<div class="cam-list-container"><a href="{href}"><img src="a.jpg"></a></div>'
        assert [c.id for c in parse_camera_list(html)] == ["A1"]

    @pytest.mark.parametrize("href", ["/cam/", "/cam", "/camera/A1", "/cam/A1/live"])
    def test_non_camera_paths_are_skipped(self, href):
        html = f'<div class="cam-list-container"><a href="{href}"><img src="a.jpg"></a></div>'
        assert parse_camera_list(html) == []

    @pytest.mark.parametrize("html", ["", "<html></html>", "not html at all <<<", None])
    def test_empty_or_garbage_input(self, html):
        """No containers is an empty result, not an error"""
        assert parse_camera_list(html) == []


class TestParseCameraDetail:
    """Test cases for parse_camera_detail"""

    def test_coordinates_name_and_feed(self, detail_html):
        """Full camera page"""
        d = parse_camera_detail(detail_html)

        assert isinstance(d, ParsedDetail)
        assert d.lat == pytest.approx(22.6273)
        assert d.lon == pytest.approx(120.3014)
        assert d.name == "高雄市 中正四路"
        assert d.live_feed_url == "live-a1"
        assert d.has_coordinates

    def test_first_match_wins(self, detail_html):
        """The later 0.0/0.0 block on the fixture page is ignored"""
        d = parse_camera_detail(detail_html)
        assert (d.lat, d.lon) != (0.0, 0.0)

    def test_latitude_only(self, lat_only_html):
        """Missing longitude is reported as None, not raised"""
        d = parse_camera_detail(lat_only_html)

        assert d.lat == pytest.approx(22.6273)
        assert d.lon is None
        assert not d.has_coordinates
        assert d.name == "不明地點"
        assert d.live_feed_url == ""

    def test_label_must_start_the_block(self):
        """Labels in the middle of a text block do not count"""
        html = "<div>說明 緯度: 22.6 經度: 120.3</div>"
        d = parse_camera_detail(html)
        assert d.lat is None and d.lon is None

    def test_fullwidth_colon_and_paragraphs(self):
        """Full-width colon and <p> blocks are accepted"""
        html = "<p>緯度：25.0330</p><p>經度： 121.5654</p>"
        d = parse_camera_detail(html)
        assert d.lat == pytest.approx(25.0330)
        assert d.lon == pytest.approx(121.5654)

    def test_feed_element_without_data_src(self):
        """Placeholder present but no lazy-load source"""
        d = parse_camera_detail('<img class="video_obj" src="x.gif">')
        assert d.live_feed_url == ""
        assert d.name == ""

    def test_empty_document(self):
        d = parse_camera_detail("")
        assert d == ParsedDetail()
