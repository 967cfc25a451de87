from __future__ import annotations

import time


# 4 decimals ~ 11 m; pans smaller than this share one list request.
# Heuristic granularity, not something the origin service guarantees.
COORD_KEY_DIGITS = 4

DETAIL_KEY_PREFIX = "detail_"

_last_stamp_ms = 0


# -------------------------
# Request keys
# -------------------------
def coord_key(lat: float, lon: float, ndigits: int = COORD_KEY_DIGITS) -> str:
    """Coalescing key for a list query, e.g. coord_key(22.62731, 120.30139) -> '22.6273,120.3014'."""
    return f"{float(lat):.{int(ndigits)}f},{float(lon):.{int(ndigits)}f}"


def detail_key(cam_id: str) -> str:
    """Coalescing key for a detail lookup; the prefix keeps it apart from coordinate keys."""
    return f"{DETAIL_KEY_PREFIX}{cam_id}"


# -------------------------
# Snapshot URLs
# -------------------------
def snapshot_url(cam_id: str, base: str) -> str:
    """Deterministic still-image URL for a camera (no cache buster)."""
    return f"{base}{cam_id}.jpg"


def cache_buster_ms() -> int:
    """
    Millisecond timestamp for `t=` query params.
    Strictly increasing within the process so two calls in the same ms still differ.
    """
    global _last_stamp_ms
    now = int(time.time() * 1000)
    _last_stamp_ms = now if now > _last_stamp_ms else _last_stamp_ms + 1
    return _last_stamp_ms


def with_cache_buster(url: str) -> str:
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}t={cache_buster_ms()}"


def fresh_snapshot_url(cam_id: str, base: str) -> str:
    """Snapshot URL with a fresh timestamp; recomputed on every call, never cached."""
    return with_cache_buster(snapshot_url(cam_id, base))
