"""
Depth lookups (hit tests) used by the distance resolver.

A depth lookup is any callable `(x, y) -> Optional[float]` taking frame
pixel coordinates and returning metres, or None when no geometry was found.
"""

import logging
import math
from typing import Optional

import numpy as np

from .types import DepthLookup

logger = logging.getLogger(__name__)


def safe_hit_test(lookup: Optional[DepthLookup], x: float, y: float) -> Optional[float]:
    """Run a hit test, turning any backend error into 'no hit'."""
    if lookup is None:
        return None
    try:
        result = lookup(x, y)
        if result is None:
            return None
        return float(result)
    except Exception as e:
        logger.warning("Hit test at (%.1f, %.1f) failed: %s", x, y, e)
        return None


class NoDepthLookup:
    """Lookup for devices without depth: never hits."""

    def __call__(self, x: float, y: float) -> Optional[float]:
        return None


class DepthMapLookup:
    """
    Hit test against a hardware depth image (e.g. RealSense D435, uint16 mm).

    The depth map may have a different resolution than the frame; frame
    coordinates are scaled to it. The median of the valid (non-zero)
    pixels in a small window around the point is returned.
    """

    def __init__(self, depth_map: np.ndarray, frame_width: int, frame_height: int,
                 depth_scale: float = 0.001, window: int = 5):
        """
        Args:
            depth_map: HxW depth image, 0 = no data
            frame_width, frame_height: Size of the frame the coordinates refer to
            depth_scale: Metres per depth unit (0.001 for millimetres)
            window: Side of the sampling window, in depth map pixels
        """
        if depth_map.ndim != 2:
            raise ValueError(f"depth map must be 2D, got shape {depth_map.shape}")
        self.depth_map = depth_map
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.depth_scale = depth_scale
        self.window = max(1, window)

    def __call__(self, x: float, y: float) -> Optional[float]:
        dh, dw = self.depth_map.shape[:2]
        scale_x = dw / self.frame_width
        scale_y = dh / self.frame_height

        dx = math.floor(x * scale_x)
        dy = math.floor(y * scale_y)
        if not (0 <= dx < dw and 0 <= dy < dh):
            return None

        half = self.window // 2
        region = self.depth_map[max(0, dy - half):min(dh, dy + half + 1),
                                max(0, dx - half):min(dw, dx + half + 1)]
        valid = region[region > 0]
        if valid.size == 0:
            return None

        return float(np.median(valid)) * self.depth_scale
