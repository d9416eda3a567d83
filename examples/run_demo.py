"""
Live webcam demo for MARKERGAZE.

Plays the role of the host application: grabs camera frames, hands them to
the pipeline as RGBA buffers and displays the annotated result.

Usage:
    python examples/run_demo.py [--camera 0] [--features]

Controls:
    f - Toggle feature probe
    q - Quit
"""

import argparse
import logging
import sys

import cv2

from markergaze import MarkerPipeline, MarkerStatus
from markergaze.utils import get_config, setup_logging

LOGGER = logging.getLogger(__name__)


def run_demo(camera_id: int = 0, features: bool = False) -> bool:
    """Run the marker pipeline on a live camera feed."""
    setup_logging()
    config = get_config()
    pipeline = MarkerPipeline(config)

    cap = cv2.VideoCapture(camera_id)
    if not cap.isOpened():
        print("ERROR: could not open camera %d" % camera_id)
        return False

    print("\nDemo running... Press 'q' to quit, 'f' to toggle features\n")
    try:
        while True:
            ok, bgr = cap.read()
            if not ok:
                print("Failed to capture frame")
                break

            rgba = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA)
            height, width = rgba.shape[:2]
            context = pipeline.context
            if context is None or not context.matches(width, height):
                pipeline.initialize(width, height)

            if features:
                pipeline.run_feature_probe(rgba, width, height)
            status = pipeline.run_marker_pipeline(rgba, width, height)

            display = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)
            label = "markers" if status == MarkerStatus.MARKERS_FOUND else "no markers"
            cv2.putText(display, label, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2, cv2.LINE_AA)
            cv2.imshow("MARKERGAZE", display)

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                break
            if key == ord("f"):
                features = not features
    except KeyboardInterrupt:
        print("\nDemo interrupted by user")
    finally:
        cap.release()
        cv2.destroyAllWindows()
        print("Demo complete!")

    return True


def main():
    parser = argparse.ArgumentParser(description="MARKERGAZE live demo")
    parser.add_argument("--camera", type=int, default=0, help="Camera index")
    parser.add_argument("--features", action="store_true", help="Start with the feature probe on")
    args = parser.parse_args()
    if not run_demo(args.camera, args.features):
        sys.exit(1)


if __name__ == "__main__":
    main()
