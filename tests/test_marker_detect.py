"""
Tests for marker detection functionality.
"""

import unittest
from unittest import mock

import numpy as np

from markergaze import DetectionResult, MarkerDetector, generate_marker
from markergaze.marker_detect import get_dictionary

from synthetic import blank_frame, green_pixels, marker_frame, red_pixels


class TestMarkerDetect(unittest.TestCase):
    """Test cases for marker detection."""

    def setUp(self):
        self.detector = MarkerDetector()

    def test_marker_detection_initialization(self):
        """Detector uses the 6x6, 250 entry dictionary by default."""
        self.assertEqual(self.detector.config.dictionary, "6x6_250")
        self.assertEqual(self.detector.dictionary.bytesList.shape[0], 250)
        self.assertEqual(self.detector.dictionary.markerSize, 6)

    def test_unknown_dictionary_falls_back(self):
        dictionary = get_dictionary("not-a-dictionary")
        self.assertEqual(dictionary.bytesList.shape[0], 250)

    def test_blank_frames_yield_nothing(self):
        """All-black and all-white frames have no markers and no candidates."""
        for value in (0, 255):
            with self.subTest(value=value):
                frame = blank_frame(value=value)
                before = frame.copy()
                result = self.detector.detect(frame)

                self.assertEqual(result.ids, ())
                self.assertEqual(result.corners, ())
                self.assertEqual(result.rejected, ())
                self.assertFalse(result.found)
                np.testing.assert_array_equal(frame, before)

    def test_marker_detection_in_frame(self):
        """A single rendered marker is accepted with its dictionary id."""
        frame = marker_frame([(23, (220, 140))])
        result = self.detector.detect(frame)

        self.assertEqual(result.ids, (23,))
        self.assertEqual(len(result.corners), 1)
        self.assertTrue(green_pixels(frame).any())

    def test_marker_corner_extraction(self):
        """Corners come back as 4x2 arrays ordered TL, TR, BR, BL."""
        frame = marker_frame([(7, (220, 140))])
        result = self.detector.detect(frame)

        self.assertEqual(result.ids, (7,))
        corners = result.corners[0]
        self.assertEqual(corners.shape, (4, 2))
        expected = np.array([[220, 140], [419, 140], [419, 339], [220, 339]], dtype=np.float32)
        np.testing.assert_allclose(corners, expected, atol=3.0)

    def test_marker_id_extraction_multiple(self):
        """Several markers are decoded with one corner set each."""
        frame = marker_frame([(3, (40, 150)), (42, (420, 150))], side=150)
        result = self.detector.detect(frame)

        self.assertEqual(sorted(result.ids), [3, 42])
        self.assertEqual(len(result.ids), len(result.corners))
        for quad in result.corners + result.rejected:
            self.assertEqual(quad.shape, (4, 2))

    def test_detection_is_repeatable(self):
        """Independent copies of one frame give identical detections."""
        frame = marker_frame([(11, (100, 100)), (200, (380, 200))], side=140)
        first = self.detector.detect(frame.copy())
        second = MarkerDetector().detect(frame.copy())

        self.assertEqual(first.ids, second.ids)
        self.assertEqual(len(first.rejected), len(second.rejected))

    def test_rejected_candidates_drawn_red(self):
        """Rejected candidates get red circles, accepted markers green ones."""
        accepted = np.array([[[100, 100], [200, 100], [200, 200], [100, 200]]], dtype=np.float32)
        rejected = np.array([[[400, 100], [500, 100], [500, 200], [400, 200]]], dtype=np.float32)
        self.detector.detector = mock.MagicMock()
        self.detector.detector.detectMarkers.return_value = ((accepted,), np.array([[5]]), (rejected,))

        frame = blank_frame()
        result = self.detector.detect(frame)

        self.assertEqual(result.ids, (5,))
        self.assertEqual(len(result.rejected), 1)
        self.assertTrue(red_pixels(frame)[80:220, 380:520].any())
        self.assertFalse(red_pixels(frame)[80:220, 80:220].any())
        self.assertTrue(green_pixels(frame)[80:220, 80:220].any())

    def test_rejected_drawing_can_be_disabled(self):
        rejected = np.array([[[400, 100], [500, 100], [500, 200], [400, 200]]], dtype=np.float32)
        detector = MarkerDetector({"draw_rejected": False})
        detector.detector = mock.MagicMock()
        detector.detector.detectMarkers.return_value = ((), None, (rejected,))

        frame = blank_frame()
        result = detector.detect(frame)

        self.assertFalse(result.found)
        self.assertEqual(len(result.rejected), 1)
        self.assertFalse(red_pixels(frame).any())

    def test_detector_reads_rgb_not_rgba(self):
        """The RGBA frame is converted to 3 channels before detection."""
        self.detector.detector = mock.MagicMock()
        self.detector.detector.detectMarkers.return_value = ((), None, ())

        self.detector.detect(blank_frame())

        image = self.detector.detector.detectMarkers.call_args[0][0]
        self.assertEqual(image.shape, (480, 640, 3))

    def test_empty_frame_raises(self):
        with self.assertRaises(ValueError):
            self.detector.detect(np.zeros((0, 0, 4), dtype=np.uint8))


class TestDetectionResult(unittest.TestCase):
    """Invariants of the per-frame detection snapshot."""

    def test_mismatched_ids_and_corners(self):
        with self.assertRaises(ValueError):
            DetectionResult(ids=(1, 2), corners=(np.zeros((4, 2), dtype=np.float32),))

    def test_corner_sets_need_four_points(self):
        with self.assertRaises(ValueError):
            DetectionResult(ids=(1,), corners=(np.zeros((3, 2), dtype=np.float32),))
        with self.assertRaises(ValueError):
            DetectionResult(rejected=(np.zeros((5, 2), dtype=np.float32),))


class TestGenerateMarker(unittest.TestCase):
    """Marker image rendering."""

    def test_generate_marker_rgba(self):
        marker = generate_marker(23, 200)
        self.assertEqual(marker.shape, (200, 200, 4))
        self.assertTrue(np.all(marker[..., 3] == 255))
        # Outer border bit is black
        self.assertEqual(int(marker[0, 0, 0]), 0)
        self.assertEqual(int(marker[199, 199, 0]), 0)

    def test_generate_marker_rejects_unknown_id(self):
        with self.assertRaises(ValueError):
            generate_marker(250)
        with self.assertRaises(ValueError):
            generate_marker(-1)


if __name__ == "__main__":
    unittest.main()
