"""
Tests for configuration helpers and the command-line entry point.
"""

import json
import os
import tempfile
import unittest

import cv2

from markergaze import main as cli
from markergaze.utils import DEFAULT_CONFIG, get_config, save_config, validate_config

from synthetic import marker_frame


class TestConfig(unittest.TestCase):
    """Configuration loading and validation."""

    def test_defaults(self):
        config = get_config()
        self.assertEqual(config["calibration"]["marker_size"], 0.025)
        self.assertEqual(config["marker_detection"]["dictionary"], "6x6_250")
        self.assertEqual(config["feature_probe"]["max_corners"], 20)
        self.assertEqual(config["overlay"]["axis_length"], 0.03)
        self.assertTrue(validate_config(config))

    def test_defaults_are_not_shared(self):
        config = get_config()
        config["calibration"]["marker_size"] = 1.0
        self.assertEqual(DEFAULT_CONFIG["calibration"]["marker_size"], 0.025)

    def test_file_overrides_are_merged(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.json")
            with open(path, "w") as f:
                json.dump({"pose": {"method": "iterative"}}, f)

            config = get_config(path)

        self.assertEqual(config["pose"]["method"], "iterative")
        self.assertEqual(config["pose"]["min_triangle_area"], 1.0)

    def test_broken_file_keeps_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.json")
            with open(path, "w") as f:
                f.write("{not json")

            with self.assertLogs(level="WARNING"):
                config = get_config(path)

        self.assertEqual(config, get_config())

    def test_save_and_reload(self):
        config = get_config()
        config["overlay"]["axis_thickness"] = 5
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "saved.json")
            self.assertTrue(save_config(config, path))
            self.assertEqual(get_config(path)["overlay"]["axis_thickness"], 5)

    def test_validate_rejects_bad_values(self):
        config = get_config()
        config["calibration"]["marker_size"] = 0
        self.assertFalse(validate_config(config))

        config = get_config()
        del config["pose"]
        self.assertFalse(validate_config(config))


class TestCommandLine(unittest.TestCase):
    """The markergaze console script."""

    def test_generate_marker(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "marker.png")
            self.assertEqual(cli.main(["--generate-marker", "23", "--output", out]), 0)
            image = cv2.imread(out, cv2.IMREAD_UNCHANGED)

        self.assertEqual(image.shape[:2], (200, 200))

    def test_annotate_image(self):
        frame = marker_frame([(23, (220, 140))])
        with tempfile.TemporaryDirectory() as tmp:
            src = os.path.join(tmp, "frame.png")
            out = os.path.join(tmp, "annotated.png")
            cv2.imwrite(src, cv2.cvtColor(frame, cv2.COLOR_RGBA2BGR))

            status = cli.annotate_image(src, out, get_config(), features=True)
            self.assertEqual(status, 1)
            self.assertTrue(os.path.exists(out))
            self.assertEqual(cli.main(["--image", src]), 0)

    def test_missing_image(self):
        self.assertEqual(cli.main(["--image", "/does/not/exist.png"]), 1)

    def test_bad_marker_id(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "marker.png")
            self.assertEqual(cli.main(["--generate-marker", "999", "--output", out]), 1)


if __name__ == "__main__":
    unittest.main()
