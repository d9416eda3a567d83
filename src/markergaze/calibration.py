"""
Approximate camera calibration derived from frame dimensions.

No checkerboard calibration is involved: the principal point is the frame
centre, the focal length is the larger frame dimension and the lens is assumed
distortion free. Good enough for a quick AR overlay, not for measurement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from .errors import CalibrationError

LOGGER = logging.getLogger(__name__)

DEFAULT_MARKER_SIZE = 0.025  # meters


def _frozen(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class CameraIntrinsics:
    """Pinhole intrinsics for a given frame size."""

    width: int
    height: int
    focal_length: float
    principal_point: Tuple[float, float]

    @classmethod
    def from_frame_size(cls, width: int, height: int) -> CameraIntrinsics:
        return cls(
            width=width,
            height=height,
            focal_length=float(max(width, height)),
            principal_point=(width / 2.0, height / 2.0),
        )

    @property
    def camera_matrix(self) -> np.ndarray:
        """Return the 3x3 camera matrix."""
        f = self.focal_length
        cx, cy = self.principal_point
        return np.array(
            [
                [f, 0.0, cx],
                [0.0, f, cy],
                [0.0, 0.0, 1.0],
            ],
            dtype=np.float64,
        )


@dataclass(frozen=True)
class DistortionModel:
    """Four-coefficient lens distortion, always zero."""

    coefficients: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)

    def as_array(self) -> np.ndarray:
        return np.array(self.coefficients, dtype=np.float64).reshape(-1, 1)


@dataclass(frozen=True, eq=False)
class MarkerTemplate:
    """Object-space corners of a square marker lying in the z=0 plane.

    Corner order is top-left, top-right, bottom-right, bottom-left, which is
    the winding the ArUco detector reports image corners in.
    """

    side_length: float
    points: np.ndarray

    @classmethod
    def square(cls, side_length: float = DEFAULT_MARKER_SIZE) -> MarkerTemplate:
        half = side_length / 2.0
        points = np.array(
            [
                [-half, half, 0.0],
                [half, half, 0.0],
                [half, -half, 0.0],
                [-half, -half, 0.0],
            ],
            dtype=np.float64,
        )
        return cls(side_length=side_length, points=_frozen(points))


@dataclass(frozen=True)
class FrameContext:
    """Calibration state shared by every call for one frame size."""

    intrinsics: CameraIntrinsics
    distortion: DistortionModel
    template: MarkerTemplate

    @property
    def width(self) -> int:
        return self.intrinsics.width

    @property
    def height(self) -> int:
        return self.intrinsics.height

    @property
    def camera_matrix(self) -> np.ndarray:
        return self.intrinsics.camera_matrix

    @property
    def dist_coeffs(self) -> np.ndarray:
        return self.distortion.as_array()

    def matches(self, width: int, height: int) -> bool:
        return self.width == width and self.height == height


def initialize(width: int, height: int, config: Optional[Dict] = None) -> FrameContext:
    """Build the calibration context for frames of ``width`` x ``height``.

    Must be called again whenever the frame dimensions change.

    Raises:
        CalibrationError: If either dimension is not a positive integer.
    """
    cfg = (config or {}).get("calibration", {})
    marker_size = float(cfg.get("marker_size", DEFAULT_MARKER_SIZE))

    if int(width) != width or int(height) != height:
        raise CalibrationError(f"Frame dimensions must be integers, got {width}x{height}")
    width, height = int(width), int(height)
    if width <= 0 or height <= 0:
        raise CalibrationError(f"Frame dimensions must be positive, got {width}x{height}")
    if marker_size <= 0:
        raise CalibrationError(f"Marker size must be positive, got {marker_size}")

    context = FrameContext(
        intrinsics=CameraIntrinsics.from_frame_size(width, height),
        distortion=DistortionModel(),
        template=MarkerTemplate.square(marker_size),
    )
    LOGGER.info(
        "Calibration initialized for %dx%d (f=%.1f, marker=%.3fm)",
        width,
        height,
        context.intrinsics.focal_length,
        marker_size,
    )
    return context
