from __future__ import annotations

"""
Camera viewer: what the camera dialog's image shows, and when it changes.

Protocol:
  - camera has a live feed  -> show it; the first load error switches to polling
  - no live feed            -> show a snapshot and re-fetch it every refresh_interval_s
  - refresh()               -> retry the live feed (cache-busted) or fetch a new snapshot

The image element is abstracted as `render(src)`; the UI calls on_image_error()
when that element fails to load.
"""

import asyncio
import logging
import re
from typing import Callable, Optional

from common.geo import with_cache_buster
from discovery.cache import CachedCamera
from discovery.service import CameraDiscoveryService


log = logging.getLogger(__name__)

MODE_IDLE = "idle"
MODE_LIVE = "live"
MODE_POLLING = "polling"

# list captions carry "距離120公尺" / "氣溫28.5℃" suffixes
_NAME_NOISE = (
    re.compile(r"距離[\d.]+(?:公尺|公里)"),
    re.compile(r"氣溫[\d.]+℃"),
)


def clean_display_name(name: str) -> str:
    for pat in _NAME_NOISE:
        name = pat.sub("", name)
    return name.strip()


class CameraViewer:
    def __init__(
        self,
        service: CameraDiscoveryService,
        render: Callable[[str], None],
        refresh_interval_s: Optional[float] = None,
    ):
        vcfg = service.config.get("viewer", {})
        self.service = service
        self.render = render
        self.refresh_interval_s = float(
            refresh_interval_s if refresh_interval_s is not None else vcfg.get("refresh_interval_s", 2.0)
        )

        self.camera: Optional[CachedCamera] = None
        self.title = ""
        self.mode = MODE_IDLE
        self.src = ""
        self._fallback_armed = False
        self._poller: Optional[asyncio.Task] = None

    # -------- public API --------

    def open(self, camera: CachedCamera) -> None:
        """Show `camera`: live feed if it advertises one, otherwise snapshot polling."""
        self._stop_polling()
        self.camera = camera
        self.title = clean_display_name(camera.name or camera.id)

        if camera.live_feed_url:
            self._show_live(camera.live_feed_url)
        else:
            self._start_polling()

    def on_image_error(self) -> None:
        """Image element failed to load. Only the live feed falls back, and only once."""
        if self.camera is None or self.mode != MODE_LIVE or not self._fallback_armed:
            return
        log.warning("Live feed failed for %s, falling back to snapshot polling", self.camera.id)
        self._fallback_armed = False
        self._start_polling()

    def refresh(self) -> None:
        """Manual reload."""
        if self.camera is None:
            return
        if self.camera.live_feed_url:
            self._stop_polling()
            self._show_live(with_cache_buster(self.camera.live_feed_url))
        else:
            self._show(self.service.get_snapshot_url(self.camera.id))

    def close(self) -> None:
        self._stop_polling()
        self._fallback_armed = False
        self.camera = None
        self.title = ""
        self.mode = MODE_IDLE
        self.src = ""

    def fullscreen_url(self) -> Optional[str]:
        if self.camera is None:
            return None
        return self.service.get_snapshot_url(self.camera.id)

    def page_url(self) -> Optional[str]:
        if self.camera is None:
            return None
        return self.service.camera_page_url(self.camera.id)

    @property
    def polling(self) -> bool:
        return self._poller is not None and not self._poller.done()

    # -------- internals --------

    def _show(self, src: str) -> None:
        self.src = src
        self.render(src)

    def _show_live(self, src: str) -> None:
        self.mode = MODE_LIVE
        self._fallback_armed = True
        self._show(src)

    def _start_polling(self) -> None:
        self._stop_polling()
        self.mode = MODE_POLLING
        self._show(self.service.get_snapshot_url(self.camera.id))
        self._poller = asyncio.ensure_future(self._poll(self.camera.id))

    def _stop_polling(self) -> None:
        if self._poller is not None and not self._poller.done():
            self._poller.cancel()
        self._poller = None

    async def _poll(self, cam_id: str) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval_s)
            if self.camera is None or self.camera.id != cam_id:
                return
            self._show(self.service.get_snapshot_url(cam_id))
