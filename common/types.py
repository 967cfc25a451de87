from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass(slots=True)
class CameraSummary:
    """
    A camera as listed on a coordinate-query page (no coordinates yet).

    Attributes:
        id: camera id, the trailing segment of its `/cam/<id>` link.
        name: display name; equals `id` when the page had no caption.
        snapshot_url: direct still-image URL.
        live_feed_url: continuously updating stream URL, "" if none advertised.

    Mutable on purpose: detail resolution enriches `name`/`live_feed_url`
    in place (see CameraCache.enrich_summary).
    """
    id: str
    name: str
    snapshot_url: str
    live_feed_url: str = ""

    @property
    def has_resolved_name(self) -> bool:
        return bool(self.name) and self.name != self.id

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class CameraDetail:
    """
    A fully resolved camera, read from its own page.

    Attributes:
        id: camera id.
        lat, lon: WGS84 degrees, both required.
        name: display name (falls back to `id`).
        live_feed_url: stream URL, "" if the page has none.
        snapshot_url: derived from `id`, never scraped.
    """
    id: str
    lat: float
    lon: float
    name: str
    live_feed_url: str
    snapshot_url: str

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0) or not (-180.0 <= self.lon <= 180.0):
            raise ValueError("lat/lon out of range")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ParsedDetail:
    """Raw result of parsing a camera page; coordinates are None when not published."""
    lat: Optional[float] = None
    lon: Optional[float] = None
    name: str = ""
    live_feed_url: str = ""

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
