"""
Per-frame marker pipeline.

Boundary operations called once per render tick by the host:

- ``initialize(width, height)`` builds the calibration context
- ``run_feature_probe(context, buffer, width, height)`` circles strong corners
- ``run_marker_pipeline(context, buffer, width, height)`` detects markers,
  solves their poses, draws the overlay and returns a status code

The buffer is a caller-owned RGBA pixel block that is read and annotated in
place. Calls are synchronous and single-threaded; the buffer must not be
touched by anyone else while a call runs, and no reference to it is kept
afterwards. The only state carried between calls is the immutable
``FrameContext``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Tuple

from .calibration import FrameContext
from .calibration import initialize as _initialize_context
from .errors import DimensionMismatchError, NotInitializedError
from .frame import frame_view
from .marker_detect import DetectionResult, MarkerDetector
from .overlay import OverlayRenderer
from .pose import PoseResult, PoseSolver
from .tracking.feature import FeatureProbe, FeatureProbeResult

LOGGER = logging.getLogger(__name__)


class MarkerStatus(IntEnum):
    """Status codes returned across the host boundary."""

    NO_MARKERS = -1
    MARKERS_FOUND = 1


@dataclass(frozen=True, eq=False)
class FrameReport:
    """Self-contained result of one marker pipeline run.

    ``poses[i]`` belongs to ``detection.ids[i]``; a pose with
    ``success=False`` means that marker was detected but its pose could not
    be solved.
    """

    status: MarkerStatus
    detection: DetectionResult
    poses: Tuple[PoseResult, ...] = ()

    @property
    def marker_ids(self) -> Tuple[int, ...]:
        return self.detection.ids

    @property
    def pose_flags(self) -> Tuple[bool, ...]:
        return tuple(pose.success for pose in self.poses)

    @property
    def axes_drawn(self) -> int:
        return sum(self.pose_flags)


class MarkerPipeline:
    """
    Marker detection, pose estimation and overlay for a stream of frames.

    Each instance owns its own calibration context and components, so
    several pipelines can run side by side.
    """

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}
        self.renderer = OverlayRenderer(self.config.get("overlay", {}))
        self.detector = MarkerDetector(self.config.get("marker_detection", {}), renderer=self.renderer)
        self.solver = PoseSolver(self.config.get("pose", {}))
        self.probe = FeatureProbe(self.config.get("feature_probe", {}), renderer=self.renderer)
        self.context: Optional[FrameContext] = None

    @property
    def initialized(self) -> bool:
        return self.context is not None

    def initialize(self, width: int, height: int) -> FrameContext:
        """(Re)build the calibration context for a frame size."""
        self.context = _initialize_context(width, height, self.config)
        return self.context

    def _require_context(self, context: Optional[FrameContext], width: int, height: int) -> FrameContext:
        context = context if context is not None else self.context
        if context is None:
            raise NotInitializedError("initialize(width, height) must be called before processing frames.")
        if not context.matches(width, height):
            raise DimensionMismatchError((context.width, context.height), (width, height))
        return context

    def run_feature_probe(
        self,
        buffer,
        width: int,
        height: int,
        context: Optional[FrameContext] = None,
    ) -> FeatureProbeResult:
        """Circle the strongest corners of the frame in place."""
        self._require_context(context, width, height)
        frame = frame_view(buffer, width, height)
        return self.probe.process_frame(frame)

    def process_frame(
        self,
        buffer,
        width: int,
        height: int,
        context: Optional[FrameContext] = None,
    ) -> FrameReport:
        """Detect markers, solve their poses and annotate the frame in place."""
        context = self._require_context(context, width, height)
        frame = frame_view(buffer, width, height)

        detection = self.detector.detect(frame)
        if not detection.found:
            return FrameReport(status=MarkerStatus.NO_MARKERS, detection=detection)

        poses = self.solver.solve_all(detection, context)
        self.renderer.draw_all_axes(frame, context, poses)

        LOGGER.debug(
            "Frame processed: markers=%s poses=%s",
            list(detection.ids),
            [pose.success for pose in poses],
        )
        return FrameReport(status=MarkerStatus.MARKERS_FOUND, detection=detection, poses=poses)

    def run_marker_pipeline(
        self,
        buffer,
        width: int,
        height: int,
        context: Optional[FrameContext] = None,
    ) -> int:
        """Run the pipeline and return ``-1`` (no markers) or ``1`` (markers)."""
        return int(self.process_frame(buffer, width, height, context).status)


# ---------------------------------------------------------------------- #
# Functional boundary API
# ---------------------------------------------------------------------- #
def initialize(width: int, height: int, config: Optional[Dict] = None) -> FrameContext:
    """Derive the calibration context for frames of ``width`` x ``height``."""
    return _initialize_context(width, height, config)


def run_feature_probe(
    context: Optional[FrameContext],
    buffer,
    width: int,
    height: int,
    config: Optional[Dict] = None,
) -> None:
    """Circle up to 20 strong corners directly in ``buffer``."""
    MarkerPipeline(config).run_feature_probe(buffer, width, height, context=context)


def process_frame(
    context: Optional[FrameContext],
    buffer,
    width: int,
    height: int,
    config: Optional[Dict] = None,
) -> FrameReport:
    """Run the marker pipeline and return the full frame report."""
    return MarkerPipeline(config).process_frame(buffer, width, height, context=context)


def run_marker_pipeline(
    context: Optional[FrameContext],
    buffer,
    width: int,
    height: int,
    config: Optional[Dict] = None,
) -> int:
    """Run the marker pipeline; returns ``-1`` (none found) or ``1`` (found)."""
    return int(process_frame(context, buffer, width, height, config).status)

