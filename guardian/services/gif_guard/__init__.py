"""
Guardian - GIF Guard Package
============================

Photosensitivity and crash-hazard screening of animated images.
"""

from guardian.services.gif_guard.analyzer import HazardVerdict, analyze_gif, classify_flashing
from guardian.services.gif_guard.fetcher import ImageFetchError, ImageFetcher
from guardian.services.gif_guard.service import GifGuardService

__all__ = [
    "GifGuardService",
    "HazardVerdict",
    "ImageFetchError",
    "ImageFetcher",
    "analyze_gif",
    "classify_flashing",
]
