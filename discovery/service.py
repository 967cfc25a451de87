from __future__ import annotations

"""
Camera discovery: nearby-camera lists and per-camera coordinates from twipcam.

Usage:
    svc = CameraDiscoveryService()
    cams = await svc.list_cameras_near(22.6273, 120.3014)
    for cam in cams:
        detail = await svc.resolve_camera_detail(cam.id)
        if detail:
            # detail.lat / detail.lon -> place a marker
            pass

Concurrent calls for the same coordinate bucket or camera id share one
request. Results are kept in an injected CameraCache for the whole session.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from common.geo import coord_key, detail_key, fresh_snapshot_url, snapshot_url
from common.types import CameraDetail, CameraSummary
from discovery.cache import CachedCamera, CameraCache
from discovery.coalescer import SingleFlight
from common.logging_setup import setup_logging
from discovery.config import load_config, merge_config
from discovery.errors import DiscoveryError, FetchError
from discovery.fetcher import ProxyFetcher
from discovery.parsers import parse_camera_detail, parse_camera_list


log = logging.getLogger(__name__)

LIST_PATH = "/api/v1/query-cam-list-by-coordinate"


class CameraDiscoveryService:
    def __init__(
        self,
        fetcher: Optional[ProxyFetcher] = None,
        cache: Optional[CameraCache] = None,
        coalescer: Optional[SingleFlight] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Params:
            fetcher: anything with `async fetch(url) -> str`; defaults to a ProxyFetcher
            cache: session cache; pass one in to share or inspect it
            coalescer: in-flight request table
            config: settings overrides, deep-merged over the defaults; when omitted
                    the settings come from discovery.config.load_config()
        """
        self.config = merge_config(config) if config else load_config()
        lcfg = self.config.get("logging") or {}
        setup_logging(lcfg.get("level"), lcfg.get("format"))
        self.site_base = str(self.config["site_base"]).rstrip("/")
        self.snapshot_base = str(self.config["snapshot_base"])
        self.key_digits = int(self.config.get("coord_key_digits", 4))
        self.fetcher = fetcher or ProxyFetcher(
            relay_url=self.config["relay_url"], timeout=self.config.get("timeout_s")
        )
        self.cache = cache if cache is not None else CameraCache()
        self.flight = coalescer if coalescer is not None else SingleFlight()

    # ----------------------------
    # URLs
    # ----------------------------
    def list_url(self, lat: float, lon: float) -> str:
        return f"{self.site_base}{LIST_PATH}?{urlencode({'lat': lat, 'lon': lon})}"

    def camera_page_url(self, cam_id: str) -> str:
        return f"{self.site_base}/cam/{cam_id}"

    def get_snapshot_url(self, cam_id: str) -> str:
        """Still image URL with a fresh `t=` timestamp; different on every call."""
        return fresh_snapshot_url(cam_id, self.snapshot_base)

    # ----------------------------
    # Public API
    # ----------------------------
    async def list_cameras_near(self, lat: float, lon: float) -> List[CameraSummary]:
        """
        Cameras listed around (lat, lon), in page order.

        New ids are added to the summary cache (existing entries untouched);
        the return value is this query's parse, not the merged cache.

        Raises:
            DiscoveryError: the page could not be fetched or parsed.
        """
        key = coord_key(lat, lon, self.key_digits)
        return await self.flight.run(key, lambda: self._fetch_list(lat, lon, key))

    async def resolve_camera_detail(self, cam_id: str) -> Optional[CameraDetail]:
        """
        Coordinates and feed URLs for one camera.

        Returns the cached detail without any request when known. Returns None
        when the camera page publishes no coordinates; nothing is cached then.

        Raises:
            DiscoveryError: the page could not be fetched or parsed.
        """
        cached = self.cache.get_detail(cam_id)
        if cached is not None:
            return cached
        return await self.flight.run(detail_key(cam_id), lambda: self._fetch_detail(cam_id))

    def get_cached_camera(self, cam_id: str) -> Optional[CachedCamera]:
        """Whatever is known about `cam_id` without touching the network."""
        return self.cache.get(cam_id)

    def close(self) -> None:
        close = getattr(self.fetcher, "close", None)
        if callable(close):
            close()

    # ----------------------------
    # Internals
    # ----------------------------
    async def _fetch_list(self, lat: float, lon: float, key: str) -> List[CameraSummary]:
        url = self.list_url(lat, lon)
        try:
            html = await self.fetcher.fetch(url)
        except FetchError as e:
            raise DiscoveryError(f"Camera list for {key} failed: {e}", cause=e) from e

        try:
            cameras = parse_camera_list(html, snapshot_base=self.snapshot_base)
        except Exception as e:
            log.exception("Unparseable camera list for %s", key)
            raise DiscoveryError(f"Camera list for {key} could not be parsed: {e}", cause=e) from e

        added = self.cache.merge_summaries(cameras)
        log.info("Listed %d cameras near %s (%d new)", len(cameras), key, added, extra={"key": key})
        return cameras

    async def _fetch_detail(self, cam_id: str) -> Optional[CameraDetail]:
        try:
            html = await self.fetcher.fetch(self.camera_page_url(cam_id))
        except FetchError as e:
            raise DiscoveryError(f"Camera page for {cam_id} failed: {e}", cause=e) from e

        try:
            parsed = parse_camera_detail(html)
        except Exception as e:
            log.exception("Unparseable camera page for %s", cam_id)
            raise DiscoveryError(f"Camera page for {cam_id} could not be parsed: {e}", cause=e) from e

        if not parsed.has_coordinates:
            log.debug("Camera %s publishes no coordinates", cam_id, extra={"cam_id": cam_id})
            return None

        try:
            detail = CameraDetail(
                id=cam_id,
                lat=float(parsed.lat),
                lon=float(parsed.lon),
                name=parsed.name or cam_id,
                live_feed_url=parsed.live_feed_url,
                snapshot_url=snapshot_url(cam_id, self.snapshot_base),
            )
        except ValueError:
            log.warning("Camera %s has out-of-range coordinates %s,%s", cam_id, parsed.lat, parsed.lon, extra={"cam_id": cam_id})
            return None

        detail = self.cache.store_detail(detail)
        self.cache.enrich_summary(detail)
        return detail
