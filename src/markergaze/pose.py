"""
Marker pose estimation module.

Recovers the rigid transform from a marker's object frame to the camera frame
by solving the perspective-n-point problem between the fixed square corner
template and the four detected image corners. The default solver
(``SOLVEPNP_IPPE_SQUARE``) is direct: no initial guess, no iterative
refinement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import TYPE_CHECKING, Dict, Optional, Sequence, Tuple

import cv2
import numpy as np

from .calibration import FrameContext

if TYPE_CHECKING:
    from .marker_detect import DetectionResult

LOGGER = logging.getLogger(__name__)

PNP_METHODS = {
    "ippe_square": cv2.SOLVEPNP_IPPE_SQUARE,
    "ippe": cv2.SOLVEPNP_IPPE,
    "iterative": cv2.SOLVEPNP_ITERATIVE,
}


@dataclass(frozen=True, eq=False)
class PoseResult:
    """Structured container for a single marker's pose."""

    success: bool
    marker_id: Optional[int] = None
    rotation_vector: Optional[np.ndarray] = None
    translation_vector: Optional[np.ndarray] = None
    rotation_matrix: Optional[np.ndarray] = None
    reprojection_error: Optional[float] = None
    method: str = ""

    def as_matrix(self) -> Optional[np.ndarray]:
        """Return the 4x4 transformation matrix if pose is valid."""
        if not self.success or self.rotation_matrix is None or self.translation_vector is None:
            return None
        transform = np.eye(4, dtype=np.float64)
        transform[:3, :3] = self.rotation_matrix
        transform[:3, 3] = self.translation_vector.flatten()
        return transform

    @property
    def distance(self) -> Optional[float]:
        """Distance from the camera centre to the marker origin in meters."""
        if not self.success or self.translation_vector is None:
            return None
        return float(np.linalg.norm(self.translation_vector))


@dataclass
class PoseSolverConfiguration:
    """Configuration for the pose solver."""

    method: str = "ippe_square"
    min_triangle_area: float = 1.0  # px^2


def validate_corners(corners: np.ndarray, min_triangle_area: float = 1.0) -> Optional[str]:
    """Check that ``corners`` can be used for a pose solve.

    Returns:
        None if the corners are usable, otherwise a short reason string.
    """
    points = np.asarray(corners, dtype=np.float64)
    if points.size != 8:
        return f"expected 4 image points, got {points.size // 2}"
    points = points.reshape(4, 2)
    if not np.all(np.isfinite(points)):
        return "non-finite corner coordinates"

    # Any three collinear corners make the square-to-quad mapping degenerate.
    for a, b, c in combinations(points, 3):
        area = 0.5 * abs((b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0]))
        if area < min_triangle_area:
            return "degenerate (collinear) corners"
    return None


class PoseSolver:
    """
    Per-marker pose estimation from detected corners.

    A failed solve only affects its own marker: the caller gets a
    ``PoseResult(success=False)`` in that slot and the remaining markers are
    still solved.
    """

    def __init__(self, config: Optional[Dict] = None):
        cfg = dict(config or {})
        self.config = PoseSolverConfiguration(**{
            k: v for k, v in cfg.items()
            if k in PoseSolverConfiguration.__dataclass_fields__
        })
        method = self.config.method.lower()
        if method not in PNP_METHODS:
            LOGGER.warning("Unknown PnP method '%s', using ippe_square", method)
            method = "ippe_square"
        self.method = method
        self._flags = PNP_METHODS[method]

    def solve(
        self,
        corners: np.ndarray,
        context: FrameContext,
        marker_id: Optional[int] = None,
    ) -> PoseResult:
        """Solve the pose of one marker.

        Args:
            corners: 4x2 image corners in template order (TL, TR, BR, BL)
            context: Calibration context for the current frame size
            marker_id: Decoded marker ID, carried into the result

        Returns:
            PoseResult; ``success`` is False if the input was degenerate or
            the solver failed.
        """
        reason = validate_corners(corners, self.config.min_triangle_area)
        if reason is not None:
            LOGGER.debug("Skipping pose for marker %s: %s", marker_id, reason)
            return PoseResult(success=False, marker_id=marker_id, method=self.method)

        image_points = np.asarray(corners, dtype=np.float64).reshape(4, 2)
        object_points = np.array(context.template.points)

        try:
            ok, rvec, tvec = cv2.solvePnP(
                object_points,
                image_points,
                context.camera_matrix,
                context.dist_coeffs,
                useExtrinsicGuess=False,
                flags=self._flags,
            )
        except cv2.error as exc:
            LOGGER.debug("solvePnP failed for marker %s: %s", marker_id, exc)
            return PoseResult(success=False, marker_id=marker_id, method=self.method)

        if not ok or rvec is None or tvec is None:
            LOGGER.debug("solvePnP returned no solution for marker %s", marker_id)
            return PoseResult(success=False, marker_id=marker_id, method=self.method)

        rvec = rvec.reshape(3, 1)
        tvec = tvec.reshape(3, 1)
        rotation_matrix, _ = cv2.Rodrigues(rvec)

        return PoseResult(
            success=True,
            marker_id=marker_id,
            rotation_vector=rvec,
            translation_vector=tvec,
            rotation_matrix=rotation_matrix,
            reprojection_error=_reprojection_error(object_points, rvec, tvec, image_points, context),
            method=self.method,
        )

    def solve_all(self, detection: "DetectionResult", context: FrameContext) -> Tuple[PoseResult, ...]:
        """Solve a pose for every accepted marker, in detection order."""
        poses = tuple(
            self.solve(corners, context, marker_id=marker_id)
            for marker_id, corners in zip(detection.ids, detection.corners)
        )
        failed = sum(1 for pose in poses if not pose.success)
        if failed:
            LOGGER.debug("%d of %d marker poses could not be solved", failed, len(poses))
        return poses


def _reprojection_error(
    object_points: np.ndarray,
    rvec: np.ndarray,
    tvec: np.ndarray,
    image_points: np.ndarray,
    context: FrameContext,
) -> float:
    projected, _ = cv2.projectPoints(
        object_points,
        rvec,
        tvec,
        context.camera_matrix,
        context.dist_coeffs,
    )
    projected = projected.reshape(-1, 2)
    return float(np.linalg.norm(projected - image_points, axis=1).mean())


def project_points(
    points_3d: np.ndarray, pose: PoseResult, context: FrameContext
) -> Optional[np.ndarray]:
    """Project marker-space 3D points into the image using ``pose``."""
    if not pose or not pose.success or pose.rotation_vector is None or pose.translation_vector is None:
        return None
    image_points, _ = cv2.projectPoints(
        np.asarray(points_3d, dtype=np.float64),
        pose.rotation_vector,
        pose.translation_vector,
        context.camera_matrix,
        context.dist_coeffs,
    )
    return image_points.reshape(-1, 2)


def project_axes(
    pose: PoseResult, context: FrameContext, axis_length: float = 0.03
) -> Optional[np.ndarray]:
    """Project the marker origin and XYZ axis tips; returns a 4x2 array."""
    axes = np.array(
        [
            [0.0, 0.0, 0.0],
            [axis_length, 0.0, 0.0],
            [0.0, axis_length, 0.0],
            [0.0, 0.0, axis_length],
        ],
        dtype=np.float64,
    )
    return project_points(axes, pose, context)


def solve_pose(
    corners: Sequence[np.ndarray], context: FrameContext, marker_id: Optional[int] = None
) -> PoseResult:
    """Solve one marker's pose with the default solver settings."""
    return PoseSolver().solve(np.asarray(corners), context, marker_id=marker_id)
