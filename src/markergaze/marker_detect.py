"""
Marker detection module.

Finds ArUco markers in RGBA frames, splitting geometric candidates into
accepted markers (interior bits decoded against the dictionary) and rejected
candidates (square-looking quads that failed to decode). Rejected candidates
are kept and drawn so near misses stay visible while tuning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from .overlay import OverlayRenderer

LOGGER = logging.getLogger(__name__)

ARUCO_DICTIONARIES = {
    "4x4_50": cv2.aruco.DICT_4X4_50,
    "4x4_100": cv2.aruco.DICT_4X4_100,
    "4x4_250": cv2.aruco.DICT_4X4_250,
    "5x5_50": cv2.aruco.DICT_5X5_50,
    "5x5_100": cv2.aruco.DICT_5X5_100,
    "5x5_250": cv2.aruco.DICT_5X5_250,
    "6x6_50": cv2.aruco.DICT_6X6_50,
    "6x6_100": cv2.aruco.DICT_6X6_100,
    "6x6_250": cv2.aruco.DICT_6X6_250,
    "7x7_50": cv2.aruco.DICT_7X7_50,
    "7x7_100": cv2.aruco.DICT_7X7_100,
    "7x7_250": cv2.aruco.DICT_7X7_250,
}

DEFAULT_DICTIONARY = "6x6_250"


def get_dictionary(name: str = DEFAULT_DICTIONARY) -> cv2.aruco.Dictionary:
    """Resolve a predefined ArUco dictionary by name (e.g. ``"6x6_250"``)."""
    key = (name or "").strip().lower()
    if key not in ARUCO_DICTIONARIES:
        LOGGER.warning("Unknown ArUco dictionary '%s', using %s", name, DEFAULT_DICTIONARY)
        key = DEFAULT_DICTIONARY
    return cv2.aruco.getPredefinedDictionary(ARUCO_DICTIONARIES[key])


def _as_quads(corner_sets) -> Tuple[np.ndarray, ...]:
    """Normalise OpenCV's ``(1, 4, 2)`` corner arrays to 4x2 float32."""
    return tuple(np.asarray(c, dtype=np.float32).reshape(4, 2) for c in corner_sets)


@dataclass(frozen=True, eq=False)
class DetectionResult:
    """Markers found in one frame.

    ``ids[i]`` belongs to ``corners[i]``. Every corner set is a 4x2 array
    ordered top-left, top-right, bottom-right, bottom-left.
    """

    ids: Tuple[int, ...] = ()
    corners: Tuple[np.ndarray, ...] = ()
    rejected: Tuple[np.ndarray, ...] = ()

    def __post_init__(self):
        if len(self.ids) != len(self.corners):
            raise ValueError(
                f"Marker id count ({len(self.ids)}) does not match corner set count ({len(self.corners)})"
            )
        for quad in self.corners + self.rejected:
            if quad.shape != (4, 2):
                raise ValueError(f"Corner sets must be 4x2, got {quad.shape}")

    @property
    def count(self) -> int:
        return len(self.ids)

    @property
    def found(self) -> bool:
        return bool(self.ids)


@dataclass
class DetectorConfiguration:
    """Configuration for the marker detector."""

    dictionary: str = DEFAULT_DICTIONARY
    circle_radius: int = 8
    accepted_color: Tuple[int, int, int, int] = (0, 255, 0, 0)
    rejected_color: Tuple[int, int, int, int] = (255, 0, 0, 0)
    draw_rejected: bool = True


class MarkerDetector:
    """Handles marker detection in video frames."""

    def __init__(self, config: Optional[Dict] = None, renderer: Optional[OverlayRenderer] = None):
        """Initialize marker detector.

        Args:
            config: ``marker_detection`` configuration section
            renderer: Renderer used for the corner circles
        """
        cfg = dict(config or {})
        for key in ("accepted_color", "rejected_color"):
            if key in cfg:
                cfg[key] = tuple(cfg[key])
        self.config = DetectorConfiguration(**{
            k: v for k, v in cfg.items()
            if k in DetectorConfiguration.__dataclass_fields__
        })
        self.renderer = renderer or OverlayRenderer()

        self.dictionary = get_dictionary(self.config.dictionary)
        self.parameters = cv2.aruco.DetectorParameters()
        self.detector = cv2.aruco.ArucoDetector(self.dictionary, self.parameters)
        LOGGER.info("MarkerDetector initialized: dictionary=%s", self.config.dictionary)

    def detect(self, frame: np.ndarray) -> DetectionResult:
        """Detect markers in an RGBA frame and annotate it in place.

        Args:
            frame: ``(H, W, 4)`` uint8 RGBA view; circles are drawn into it

        Returns:
            DetectionResult snapshot for this frame
        """
        if frame is None or frame.size == 0:
            raise ValueError("Frame cannot be empty.")

        rgb = cv2.cvtColor(frame, cv2.COLOR_RGBA2RGB)
        corners, ids, rejected = self.detector.detectMarkers(rgb)

        marker_ids = tuple(int(i) for i in ids.flatten()) if ids is not None else ()
        result = DetectionResult(
            ids=marker_ids,
            corners=_as_quads(corners) if marker_ids else (),
            rejected=_as_quads(rejected),
        )
        LOGGER.debug(
            "Detected %d markers %s, %d rejected candidates",
            result.count,
            list(result.ids),
            len(result.rejected),
        )

        radius = self.config.circle_radius
        if self.config.draw_rejected:
            self.renderer.draw_corners(frame, result.rejected, self.config.rejected_color, radius)
        self.renderer.draw_corners(frame, result.corners, self.config.accepted_color, radius)
        return result


def generate_marker(
    marker_id: int,
    side_pixels: int = 200,
    border_bits: int = 1,
    dictionary: str = DEFAULT_DICTIONARY,
) -> np.ndarray:
    """Render a dictionary marker as an ``(N, N, 4)`` RGBA image.

    Raises:
        ValueError: If ``marker_id`` is outside the dictionary.
    """
    aruco_dict = get_dictionary(dictionary)
    size = aruco_dict.bytesList.shape[0]
    if not 0 <= marker_id < size:
        raise ValueError(f"Marker id {marker_id} outside dictionary {dictionary} (0..{size - 1})")
    marker = cv2.aruco.generateImageMarker(aruco_dict, int(marker_id), int(side_pixels), borderBits=border_bits)
    return cv2.cvtColor(marker, cv2.COLOR_GRAY2RGBA)
