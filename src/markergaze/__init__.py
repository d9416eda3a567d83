"""
MARKERGAZE - Fiducial marker detection and pose overlay.

This package provides functionality for:
- Approximate camera calibration from frame dimensions
- ArUco marker detection with accepted/rejected candidate split
- Per-marker pose estimation
- In-place diagnostic overlays on RGBA frame buffers
- A good-features-to-track probe for visual feedback
"""

from .calibration import (
    CameraIntrinsics,
    DistortionModel,
    FrameContext,
    MarkerTemplate,
)
from .errors import (
    CalibrationError,
    DimensionMismatchError,
    FrameShapeError,
    MarkergazeError,
    NotInitializedError,
)
from .frame import frame_view
from .marker_detect import DetectionResult, MarkerDetector, generate_marker
from .overlay import OverlayConfiguration, OverlayRenderer
from .pipeline import (
    FrameReport,
    MarkerPipeline,
    MarkerStatus,
    initialize,
    process_frame,
    run_feature_probe,
    run_marker_pipeline,
)
from .pose import PoseResult, PoseSolver, solve_pose
from .tracking import FeatureProbe, FeatureProbeResult

__version__ = "0.1.0"

__all__ = [
    # Boundary API
    "initialize",
    "run_feature_probe",
    "run_marker_pipeline",
    "process_frame",
    "MarkerPipeline",
    "MarkerStatus",
    "FrameReport",
    # Calibration
    "CameraIntrinsics",
    "DistortionModel",
    "FrameContext",
    "MarkerTemplate",
    # Detection
    "DetectionResult",
    "MarkerDetector",
    "generate_marker",
    # Pose
    "PoseResult",
    "PoseSolver",
    "solve_pose",
    # Overlay & probe
    "OverlayConfiguration",
    "OverlayRenderer",
    "FeatureProbe",
    "FeatureProbeResult",
    "frame_view",
    # Errors
    "MarkergazeError",
    "CalibrationError",
    "NotInitializedError",
    "DimensionMismatchError",
    "FrameShapeError",
]
