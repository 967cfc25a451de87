from __future__ import annotations

"""
Viewport loader: turn "the map now shows (lat, lon) at zoom z" into markers.

Usage:
    loader = ViewportLoader(service, on_marker=add_marker_to_map, notify=show_toast)
    loader.schedule(lat, lon, zoom)   # from the map's move-end handler
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from common.types import CameraDetail, CameraSummary
from discovery.cache import CachedCamera
from discovery.errors import DiscoveryError
from discovery.service import CameraDiscoveryService


log = logging.getLogger(__name__)

ZOOM_IN_MESSAGE = "Zoom in to see cameras"
LOAD_FAILED_MESSAGE = "Could not load camera data"


class ViewportLoader:
    def __init__(
        self,
        service: CameraDiscoveryService,
        on_marker: Optional[Callable[[CameraDetail], None]] = None,
        notify: Optional[Callable[[str], None]] = None,
        min_zoom: Optional[int] = None,
        batch_size: Optional[int] = None,
        debounce_s: Optional[float] = None,
    ):
        """
        Params:
            service: discovery service used for lists and details
            on_marker: called once per camera id that gets a map marker
            notify: short non-blocking user message (toast); defaults to logging
            min_zoom, batch_size, debounce_s: default to config["viewer"]
        """
        vcfg = service.config.get("viewer", {})
        self.service = service
        self.on_marker = on_marker
        self.notify = notify or (lambda msg: log.info("notify: %s", msg))
        self.min_zoom = int(min_zoom if min_zoom is not None else vcfg.get("min_zoom", 13))
        self.batch_size = max(1, int(batch_size if batch_size is not None else vcfg.get("batch_size", 4)))
        self.debounce_s = float(debounce_s if debounce_s is not None else vcfg.get("debounce_s", 0.8))

        self.markers: Dict[str, CameraDetail] = {}
        self._loading = False
        self._timer: Optional[asyncio.Task] = None
        self.last_load: Optional[asyncio.Task] = None

    # -------- public API --------

    def schedule(self, lat: float, lon: float, zoom: int) -> asyncio.Task:
        """
        Debounced load: restarts the timer; only the last call within debounce_s runs.
        Restarting the timer never aborts a load that has already started.
        """
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.ensure_future(self._delayed_load(lat, lon, zoom))
        return self._timer

    async def load(self, lat: float, lon: float, zoom: int) -> int:
        """
        List cameras around (lat, lon) and add a marker for every camera with coordinates.

        Details are resolved `batch_size` at a time. A camera whose lookup fails
        is skipped; a failed list query is reported through `notify`.
        Returns the number of markers after the load.
        """
        if self._loading:
            log.debug("Load already running; ignoring %s,%s", lat, lon)
            return len(self.markers)

        if zoom < self.min_zoom:
            self.notify(ZOOM_IN_MESSAGE)
            return len(self.markers)

        self._loading = True
        try:
            cameras = await self.service.list_cameras_near(lat, lon)
            for i in range(0, len(cameras), self.batch_size):
                batch = cameras[i:i + self.batch_size]
                await asyncio.gather(*(self._resolve_one(cam) for cam in batch))
        except DiscoveryError as e:
            log.warning("Viewport load failed: %s", e)
            self.notify(LOAD_FAILED_MESSAGE)
        finally:
            self._loading = False
        return len(self.markers)

    def camera_for(self, cam_id: str) -> Optional[CachedCamera]:
        """What a marker click should show: freshest cached record, else the marker's own detail."""
        return self.service.get_cached_camera(cam_id) or self.markers.get(cam_id)

    @property
    def marker_ids(self) -> List[str]:
        return list(self.markers)

    # -------- internals --------

    async def _delayed_load(self, lat: float, lon: float, zoom: int) -> int:
        await asyncio.sleep(self.debounce_s)
        # the load runs in its own task so cancelling the timer leaves it alone
        self.last_load = asyncio.ensure_future(self.load(lat, lon, zoom))
        return await asyncio.shield(self.last_load)

    async def _resolve_one(self, cam: CameraSummary) -> None:
        if cam.id in self.markers:
            return
        try:
            detail = await self.service.resolve_camera_detail(cam.id)
        except DiscoveryError as e:
            log.debug("Skipping camera %s: %s", cam.id, e)
            return
        if detail is not None:
            self._add_marker(detail)

    def _add_marker(self, detail: CameraDetail) -> None:
        if detail.id in self.markers:
            return
        self.markers[detail.id] = detail
        if self.on_marker is not None:
            self.on_marker(detail)
