"""
Command-line entry point for MARKERGAZE.

Annotates image files offline and writes printable markers.

Usage:
    markergaze --image frame.png --output annotated.png
    markergaze --image frame.png --features --verbose
    markergaze --generate-marker 23 --output marker_23.png
"""

from __future__ import annotations

import argparse
import logging
import sys

import cv2

from .errors import MarkergazeError
from .marker_detect import generate_marker
from .pipeline import MarkerPipeline, MarkerStatus
from .utils import get_config, setup_logging

LOGGER = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="MARKERGAZE - ArUco marker detection with pose overlay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  markergaze --image frame.png --output out.png   # Annotate an image
  markergaze --generate-marker 23 -o marker.png   # Write marker #23
        """,
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--image", "-i", help="Image file to annotate")
    mode.add_argument("--generate-marker", type=int, metavar="ID", help="Write marker ID as an image")

    parser.add_argument("--output", "-o", help="Where to write the resulting image")
    parser.add_argument("--features", action="store_true", help="Also run the feature probe")
    parser.add_argument("--marker-pixels", type=int, default=200, help="Side length of generated markers")
    parser.add_argument("--config", "-c", help="JSON configuration file")
    parser.add_argument(
        "--verbose", "-V",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    return parser.parse_args(argv)


def annotate_image(path: str, output: str, config: dict, features: bool = False) -> int:
    """Run the marker pipeline on an image file; returns the pipeline status."""
    bgr = cv2.imread(path, cv2.IMREAD_COLOR)
    if bgr is None:
        raise FileNotFoundError(f"Could not read image: {path}")

    rgba = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA)
    height, width = rgba.shape[:2]

    pipeline = MarkerPipeline(config)
    pipeline.initialize(width, height)

    report = pipeline.process_frame(rgba, width, height)
    if report.status == MarkerStatus.NO_MARKERS:
        LOGGER.info("No markers found (%d rejected candidates)", len(report.detection.rejected))
    for pose in report.poses:
        if pose.success:
            t = pose.translation_vector.flatten()
            LOGGER.info(
                "Marker %d: t=[%.3f, %.3f, %.3f] m, reprojection error %.2f px",
                pose.marker_id, t[0], t[1], t[2], pose.reprojection_error,
            )
        else:
            LOGGER.info("Marker %d: pose could not be solved", pose.marker_id)

    # Probe circles must not be drawn before marker decoding
    if features:
        probe = pipeline.run_feature_probe(rgba, width, height)
        LOGGER.info("Feature probe: %d corners", probe.count)

    if output:
        cv2.imwrite(output, cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA))
        LOGGER.info("Annotated image written to %s", output)
    return int(report.status)


def write_marker(marker_id: int, output: str, side_pixels: int, config: dict):
    """Render a dictionary marker to ``output``."""
    dictionary = config.get("marker_detection", {}).get("dictionary", "6x6_250")
    marker = generate_marker(marker_id, side_pixels, dictionary=dictionary)
    cv2.imwrite(output, cv2.cvtColor(marker, cv2.COLOR_RGBA2BGRA))
    LOGGER.info("Marker %d written to %s", marker_id, output)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level=log_level)

    config = get_config(args.config)

    try:
        if args.generate_marker is not None:
            output = args.output or f"marker_{args.generate_marker}.png"
            write_marker(args.generate_marker, output, args.marker_pixels, config)
        else:
            annotate_image(args.image, args.output, config, features=args.features)
    except (MarkergazeError, FileNotFoundError, ValueError) as e:
        LOGGER.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
