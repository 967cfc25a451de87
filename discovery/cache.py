from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Union

from common.types import CameraDetail, CameraSummary


log = logging.getLogger(__name__)

CachedCamera = Union[CameraDetail, CameraSummary]


class CameraCache:
    """
    Session-lifetime store for what we know about each camera id.

        summaries: id -> CameraSummary   (from list pages, no coordinates)
        details:   id -> CameraDetail    (from camera pages, with coordinates)

    Entries are never evicted and never removed individually. Summaries are
    only ever enriched; details never change once stored.
    """

    def __init__(self) -> None:
        self._summaries: Dict[str, CameraSummary] = {}
        self._details: Dict[str, CameraDetail] = {}

    # -------- public API --------

    def merge_summaries(self, summaries: Iterable[CameraSummary]) -> int:
        """Add summaries for unseen ids; the first-seen entry wins. Returns how many were added."""
        added = 0
        for cam in summaries:
            if cam.id in self._summaries:
                continue
            self._summaries[cam.id] = cam
            added += 1
        if added:
            log.debug("Cached %d new camera summaries (%d total)", added, len(self._summaries))
        return added

    def get_summary(self, cam_id: str) -> Optional[CameraSummary]:
        return self._summaries.get(cam_id)

    def get_detail(self, cam_id: str) -> Optional[CameraDetail]:
        return self._details.get(cam_id)

    def store_detail(self, detail: CameraDetail) -> CameraDetail:
        """
        Cache a resolved camera. An id already present keeps its first detail
        (coordinates are fixed for the session); the stored entry is returned.
        """
        existing = self._details.get(detail.id)
        if existing is not None:
            return existing
        self._details[detail.id] = detail
        return detail

    def enrich_summary(self, detail: CameraDetail) -> bool:
        """
        Fill a cached summary's empty live feed / unresolved name from `detail`, in place.
        Returns True if the summary changed.
        """
        summary = self._summaries.get(detail.id)
        if summary is None:
            return False
        changed = False
        if not summary.live_feed_url and detail.live_feed_url:
            summary.live_feed_url = detail.live_feed_url
            changed = True
        if not summary.has_resolved_name and detail.name and detail.name != detail.id:
            summary.name = detail.name
            changed = True
        return changed

    def get(self, cam_id: str) -> Optional[CachedCamera]:
        """Best known record for `cam_id`: detail first (it has coordinates), then summary."""
        return self._details.get(cam_id) or self._summaries.get(cam_id)

    def stats(self) -> Dict[str, int]:
        return {
            "summaries": len(self._summaries),
            "details": len(self._details),
        }

    def clear(self) -> None:
        self._summaries.clear()
        self._details.clear()
