"""
RGBA frame buffer views.

The caller owns the pixel memory. A view wraps it without copying, so every
drawing operation lands directly in the caller's buffer. The same memory is
read and written during one call; no other reader or writer may touch it
until the call returns, and views are never kept past that point.
"""

from __future__ import annotations

import numpy as np

from .errors import FrameShapeError

CHANNELS = 4


def frame_view(buffer, width: int, height: int) -> np.ndarray:
    """Return a writable ``(height, width, 4)`` uint8 view over ``buffer``.

    Args:
        buffer: Any writable buffer-protocol object (``bytearray``,
            ``memoryview``, contiguous ``numpy.ndarray``) holding exactly
            ``width * height * 4`` bytes in R,G,B,A row-major order.
        width: Frame width in pixels.
        height: Frame height in pixels.

    Raises:
        FrameShapeError: If the buffer is missing, read-only, non-contiguous
            or of the wrong size.
    """
    if buffer is None:
        raise FrameShapeError("Frame buffer cannot be None.")

    expected = width * height * CHANNELS

    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            raise FrameShapeError(f"Frame buffer must be uint8, got {buffer.dtype}.")
        if not buffer.flags.c_contiguous:
            raise FrameShapeError("Frame buffer must be C-contiguous.")
        if buffer.size != expected:
            raise FrameShapeError(
                f"Frame buffer holds {buffer.size} bytes, expected {expected} "
                f"for {width}x{height} RGBA."
            )
        view = buffer.reshape(height, width, CHANNELS)
    else:
        try:
            view = np.frombuffer(buffer, dtype=np.uint8)
        except (TypeError, ValueError) as exc:
            raise FrameShapeError(f"Unsupported frame buffer: {exc}") from exc
        if view.size != expected:
            raise FrameShapeError(
                f"Frame buffer holds {view.size} bytes, expected {expected} "
                f"for {width}x{height} RGBA."
            )
        view = view.reshape(height, width, CHANNELS)

    if not view.flags.writeable:
        raise FrameShapeError("Frame buffer is read-only; annotations are drawn in place.")

    return view
