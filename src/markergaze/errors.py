"""
Exception types raised by the marker pipeline.

Zero detections are not errors; they are reported through the status code.
"""


class MarkergazeError(Exception):
    """Base class for all markergaze errors."""


class CalibrationError(MarkergazeError, ValueError):
    """Raised when a frame context cannot be built from the given dimensions."""


class NotInitializedError(MarkergazeError, RuntimeError):
    """Raised when a frame is processed before ``initialize`` was called."""


class DimensionMismatchError(MarkergazeError, ValueError):
    """Raised when a frame's dimensions differ from the initialized context."""

    def __init__(self, expected, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Frame is {actual[0]}x{actual[1]} but context was initialized "
            f"for {expected[0]}x{expected[1]}; call initialize() again."
        )


class FrameShapeError(MarkergazeError, ValueError):
    """Raised when a pixel buffer does not match the RGBA frame contract."""
