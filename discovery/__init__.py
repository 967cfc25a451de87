"""
Camera discovery & caching

- Fetches twipcam pages through a CORS relay (fetcher.py)
- Parses list pages and camera pages into records (parsers.py)
- Shares one in-flight request per coordinate bucket / camera id (coalescer.py)
- Keeps summaries and resolved details for the session (cache.py)
- CameraDiscoveryService ties it together (service.py)
"""
from .errors import DiscoveryError, FetchError, HttpError, NetworkError
from .service import CameraDiscoveryService

__all__ = [
    "CameraDiscoveryService",
    "DiscoveryError",
    "FetchError",
    "HttpError",
    "NetworkError",
]
