"""
FrameData model for captured video frames.

Frames reach the observation loop either from a local OpenCV capture (BGR
arrays) or as raw `(width, height, pixels)` buffers handed over by the media
channel, which are RGBA like a browser canvas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import cv2
import numpy as np


@dataclass
class FrameData:
    """
    A captured frame: pixels plus the metadata the observation loop needs.

    `timestamp` doubles as the tracker clock, so it must come from one clock
    for the whole stream.

    Attributes:
        frame: Pixel data as a numpy array (BGR, height x width x channels).
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Unix timestamp when the frame was captured.
        frame_index: Sequential frame number since the source was opened.
        source: Identifier for the camera/stream.
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
        )

    @classmethod
    def from_pixels(
        cls,
        width: int,
        height: int,
        pixels: Union[bytes, bytearray, memoryview, np.ndarray],
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        """
        Adapter: build from a flat RGBA buffer of width * height * 4 bytes.

        Raises:
            ValueError: If the buffer length does not match the dimensions.
        """
        flat = np.frombuffer(pixels, dtype=np.uint8) if not isinstance(pixels, np.ndarray) else pixels.ravel()
        expected = width * height * 4
        if flat.size != expected:
            raise ValueError(f"Expected {expected} RGBA bytes for {width}x{height}, got {flat.size}")
        bgr = cv2.cvtColor(flat.reshape(height, width, 4), cv2.COLOR_RGBA2BGR)
        return cls.from_numpy(bgr, timestamp=timestamp, frame_index=frame_index, source=source)

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
