"""
Good-features-to-track probe.

A lightweight corner detector used for generic visual feedback, independent of
marker detection. It keeps no state between frames.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from ..overlay import OverlayRenderer

LOGGER = logging.getLogger(__name__)


@dataclass
class FeatureProbeConfiguration:
    """Configuration for the feature probe."""

    max_corners: int = 20
    quality_level: float = 0.01  # Relative to the strongest corner
    min_distance: float = 10.0  # Pixels between accepted corners
    block_size: int = 3
    use_harris: bool = False
    harris_k: float = 0.04
    circle_radius: int = 8
    color: Tuple[int, int, int, int] = (0, 255, 0, 0)


@dataclass(frozen=True, eq=False)
class FeatureProbeResult:
    """Corners found by one probe pass."""

    points: np.ndarray  # shape (N, 2), N <= max_corners
    drawn: int = 0

    @property
    def count(self) -> int:
        return int(self.points.shape[0])


class FeatureProbe:
    """Finds the strongest corners in a frame and circles them in place."""

    def __init__(self, config: Optional[Dict] = None, renderer: Optional[OverlayRenderer] = None):
        cfg = dict(config or {})
        if "color" in cfg:
            cfg["color"] = tuple(cfg["color"])
        self.config = FeatureProbeConfiguration(**{
            k: v for k, v in cfg.items()
            if k in FeatureProbeConfiguration.__dataclass_fields__
        })
        self.renderer = renderer or OverlayRenderer()

    def detect(self, frame: np.ndarray) -> np.ndarray:
        """Return the corners of an RGBA frame as an ``(N, 2)`` float32 array."""
        if frame is None or frame.size == 0:
            raise ValueError("Frame cannot be empty.")

        gray = frame if frame.ndim == 2 else cv2.cvtColor(frame, cv2.COLOR_RGBA2GRAY)
        corners = cv2.goodFeaturesToTrack(
            gray,
            maxCorners=self.config.max_corners,
            qualityLevel=self.config.quality_level,
            minDistance=self.config.min_distance,
            mask=None,
            blockSize=self.config.block_size,
            useHarrisDetector=self.config.use_harris,
            k=self.config.harris_k,
        )
        # goodFeaturesToTrack returns None rather than an empty array
        if corners is None:
            return np.empty((0, 2), dtype=np.float32)
        return corners.reshape(-1, 2).astype(np.float32)

    def process_frame(self, frame: np.ndarray) -> FeatureProbeResult:
        """Detect corners and draw a circle at each one into ``frame``."""
        points = self.detect(frame)
        drawn = self.renderer.draw_points(
            frame,
            points,
            self.config.color,
            radius=self.config.circle_radius,
        )
        LOGGER.debug("Feature probe found %d corners", len(points))
        return FeatureProbeResult(points=points, drawn=drawn)
