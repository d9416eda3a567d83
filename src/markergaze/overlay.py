"""
Diagnostic overlay rendering.

Draws corner circles and axis triads straight into an RGBA frame view. Colors
are given in R,G,B,A order because the frames handed in by the host are RGBA,
not OpenCV's usual BGR.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

import cv2
import numpy as np

from .calibration import FrameContext
from .pose import PoseResult, project_axes

LOGGER = logging.getLogger(__name__)

Color = Tuple[int, int, int, int]

# Projected points further out than this are treated as degenerate.
_MAX_PIXEL_COORD = 1e6


@dataclass
class OverlayConfiguration:
    """Configuration for the overlay renderer."""

    axis_length: float = 0.03  # meters
    axis_thickness: int = 3
    antialiasing: bool = True
    x_axis_color: Color = (255, 0, 0, 0)
    y_axis_color: Color = (0, 255, 0, 0)
    z_axis_color: Color = (0, 0, 255, 0)


def _to_pixel(point: Sequence[float]) -> Optional[Tuple[int, int]]:
    x, y = float(point[0]), float(point[1])
    if not (np.isfinite(x) and np.isfinite(y)):
        return None
    if abs(x) > _MAX_PIXEL_COORD or abs(y) > _MAX_PIXEL_COORD:
        return None
    return int(round(x)), int(round(y))


class OverlayRenderer:
    """
    Renders diagnostic geometry onto camera frames in place.

    Supports:
    - Unfilled circles at detected corners / feature points
    - XYZ axis triads projected from a marker pose
    """

    def __init__(self, config: Optional[Dict] = None):
        """Initialize overlay renderer.

        Args:
            config: Configuration dictionary with overlay settings
        """
        cfg = dict(config or {})
        for key in ("x_axis_color", "y_axis_color", "z_axis_color"):
            if key in cfg:
                cfg[key] = tuple(cfg[key])
        self.config = OverlayConfiguration(**{
            k: v for k, v in cfg.items()
            if k in OverlayConfiguration.__dataclass_fields__
        })

    @property
    def line_type(self) -> int:
        return cv2.LINE_AA if self.config.antialiasing else cv2.LINE_8

    # ------------------------------------------------------------------ #
    # 2D annotations
    # ------------------------------------------------------------------ #
    def draw_points(
        self,
        frame: np.ndarray,
        points: Iterable[Sequence[float]],
        color: Color,
        radius: int = 8,
        thickness: int = 1,
    ) -> int:
        """Draw an unfilled circle at every point.

        Returns:
            Number of circles drawn.
        """
        drawn = 0
        for point in points:
            center = _to_pixel(point)
            if center is None:
                LOGGER.debug("Skipping non-drawable point %s", point)
                continue
            cv2.circle(frame, center, radius, tuple(color), thickness)
            drawn += 1
        return drawn

    def draw_corners(
        self,
        frame: np.ndarray,
        corner_sets: Iterable[np.ndarray],
        color: Color,
        radius: int = 8,
    ) -> int:
        """Draw a circle on each corner of each quad."""
        drawn = 0
        for corners in corner_sets:
            drawn += self.draw_points(frame, np.asarray(corners).reshape(-1, 2), color, radius)
        return drawn

    # ------------------------------------------------------------------ #
    # 3D annotations
    # ------------------------------------------------------------------ #
    def draw_axes(
        self,
        frame: np.ndarray,
        context: FrameContext,
        pose: PoseResult,
        axis_length: Optional[float] = None,
    ) -> bool:
        """Render coordinate axes (RGB = XYZ) for a marker pose.

        Returns:
            True if the triad was drawn.
        """
        if not pose.success:
            return False

        length = axis_length if axis_length is not None else self.config.axis_length
        pts_2d = project_axes(pose, context, axis_length=length)
        if pts_2d is None:
            return False

        pixels = [_to_pixel(p) for p in pts_2d]
        if any(p is None for p in pixels):
            LOGGER.debug("Axis projection for marker %s is degenerate, skipping", pose.marker_id)
            return False

        origin = pixels[0]
        thickness = self.config.axis_thickness
        cv2.line(frame, origin, pixels[1], self.config.x_axis_color, thickness, self.line_type)
        cv2.line(frame, origin, pixels[2], self.config.y_axis_color, thickness, self.line_type)
        cv2.line(frame, origin, pixels[3], self.config.z_axis_color, thickness, self.line_type)
        return True

    def draw_all_axes(
        self,
        frame: np.ndarray,
        context: FrameContext,
        poses: Iterable[PoseResult],
    ) -> int:
        """Draw an axis triad for every successful pose."""
        return sum(1 for pose in poses if self.draw_axes(frame, context, pose))
