from __future__ import annotations

"""
HTML -> records for the two twipcam page shapes.

Both functions are pure: markup in, dataclasses out. Anything that does not
match the expected layout is skipped or left empty; nothing here raises on
odd markup.
"""

import re
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from common.geo import snapshot_url
from common.types import CameraSummary, ParsedDetail
from discovery.config import DEFAULTS


CAM_PATH_RE = re.compile(r"/cam/([^/]+)$")
LAT_RE = re.compile(r"^緯度\s*[:：]\s*(-?\d+(?:\.\d+)?)")
LON_RE = re.compile(r"^經度\s*[:：]\s*(-?\d+(?:\.\d+)?)")

LIST_CONTAINER = ".cam-list-container"
LIST_CAPTION = ".w3-display-bottomright"
LIVE_FEED_ELEMENT = ".video_obj"
TEXT_BLOCKS = ["div", "p", "li"]
TITLE_SUFFIX = "即時影像"


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def _attr(tag, name: str) -> str:
    val = tag.get(name)
    if isinstance(val, list):  # multi-valued attrs come back as lists
        val = " ".join(val)
    return (val or "").strip()


def parse_camera_list(html: str, snapshot_base: str = DEFAULTS["snapshot_base"]) -> List[CameraSummary]:
    """
    Parse a coordinate-query page into camera summaries, in document order.

    A container is skipped when it lacks a link or an image, or when the link
    is not a `/cam/<id>` path. Duplicates are returned as found.
    """
    cameras: List[CameraSummary] = []
    for container in _soup(html).select(LIST_CONTAINER):
        link = container.find("a")
        img = container.find("img")
        if link is None or img is None:
            continue

        # query, fragment and a trailing slash are not part of the id
        m = CAM_PATH_RE.search(urlparse(_attr(link, "href")).path.rstrip("/"))
        if not m:
            continue
        cam_id = m.group(1)

        caption = container.select_one(LIST_CAPTION)
        name = caption.get_text(" ", strip=True) if caption else ""

        cameras.append(
            CameraSummary(
                id=cam_id,
                name=name or cam_id,
                snapshot_url=_attr(img, "src") or snapshot_url(cam_id, snapshot_base),
                live_feed_url=_attr(img, "data-src"),
            )
        )
    return cameras


def _first_number(pattern: re.Pattern, text: str) -> Optional[float]:
    m = pattern.match(text)
    if not m:
        return None
    try:
        return float(m.group(1))
    except ValueError:
        return None


def parse_camera_detail(html: str) -> ParsedDetail:
    """
    Parse a single camera page.

    Coordinates come from text blocks starting with `緯度:` / `經度:`; the first
    occurrence of each wins. They stay None when the page does not publish them.
    """
    soup = _soup(html)
    out = ParsedDetail()

    for block in soup.find_all(TEXT_BLOCKS):
        text = block.get_text().strip()
        if out.lat is None:
            out.lat = _first_number(LAT_RE, text)
        if out.lon is None:
            out.lon = _first_number(LON_RE, text)
        if out.has_coordinates:
            break

    h1 = soup.find("h1")
    if h1 is not None:
        out.name = h1.get_text().replace(TITLE_SUFFIX, "").strip()

    feed = soup.select_one(LIVE_FEED_ELEMENT)
    if feed is not None:
        out.live_feed_url = _attr(feed, "data-src")

    return out
