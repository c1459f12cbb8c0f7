"""
Guardian - Tracking Package
===========================

Per-key sliding windows shared by every detector.
"""

from guardian.services.tracking.window import SlidingWindowTracker, WindowEntry, WindowKey

__all__ = ["SlidingWindowTracker", "WindowEntry", "WindowKey"]
