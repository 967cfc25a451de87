from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULTS: Dict[str, Any] = {
    "relay_url": "https://api.allorigins.win/raw?url=",
    "site_base": "https://www.twipcam.com",
    "snapshot_base": "https://c01.twipcam.com/cam/snapshot/",
    "coord_key_digits": 4,
    "timeout_s": None,  # the core enforces no timeout unless configured
    "logging": {
        "level": None,  # None -> LOG_LEVEL env -> INFO
        "format": None,  # "json" | "text"; None -> LOG_FORMAT env -> json
    },
    "viewer": {
        "min_zoom": 13,
        "batch_size": 4,
        "debounce_s": 0.8,
        "refresh_interval_s": 2.0,
    },
}

_ENV_OVERRIDES = {
    "CAMERA_RELAY_URL": "relay_url",
    "CAMERA_SITE_BASE": "site_base",
    "CAMERA_SNAPSHOT_BASE": "snapshot_base",
}


def _deep_merge(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in extra.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def merge_config(overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Defaults with `overrides` deep-merged on top; a partial dict is fine."""
    return _deep_merge(copy.deepcopy(DEFAULTS), overrides or {})


def load_config(path: Optional[str] = "config/params.yaml") -> Dict[str, Any]:
    """
    Return the discovery settings.

    Built-in defaults are used when `path` is None or does not exist; otherwise
    the YAML mapping is deep-merged over them. CAMERA_RELAY_URL, CAMERA_SITE_BASE
    and CAMERA_SNAPSHOT_BASE env vars win over both.
    """
    cfg = merge_config(None)
    if path and Path(path).exists():
        with open(path, "r", encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path}: expected a mapping at top level")
        cfg = _deep_merge(cfg, loaded)

    for env, key in _ENV_OVERRIDES.items():
        val = os.getenv(env)
        if val:
            cfg[key] = val
    return cfg
