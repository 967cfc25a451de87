"""
Viewer: consumers of the discovery service

Provides:
- ViewportLoader: debounced "cameras around the map centre" loading with a marker registry
- CameraViewer: live feed first, snapshot polling when the feed fails to load

Both are headless: map markers, toasts and the image element are callbacks.
"""
from .display import CameraViewer, clean_display_name
from .viewport import ViewportLoader

__all__ = ["CameraViewer", "ViewportLoader", "clean_display_name"]
