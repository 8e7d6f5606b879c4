"""
OpenCV-based observation source.

Supports USB webcams (device_id as int), stream URLs and video files
(device_id as str).
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import cv2

from models.frame import FrameData
from .base import ObservationConfig, ObservationSource


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Attributes:
        device_id: Camera index (int), stream URL (str) or file path (str).
        max_retries: Attempts to open the device before giving up.
        flip_horizontal: Mirror the frame (front-facing cameras).
    """
    device_id: Union[int, str] = 0
    max_retries: int = 3
    flip_horizontal: bool = False

    @classmethod
    def from_camera_config(cls, camera_cfg: Dict[str, Any], source_id: str = "camera") -> "OpenCVSourceConfig":
        """Adapter: Create from the `camera` config section."""
        resolution = camera_cfg.get("resolution")
        return cls(
            source_id=source_id,
            resolution=tuple(resolution) if resolution else None,
            fps=camera_cfg.get("fps"),
            device_id=camera_cfg.get("device_id", 0),
            max_retries=camera_cfg.get("max_retries", 3),
            flip_horizontal=camera_cfg.get("flip_horizontal", False),
        )


class OpenCVSource(ObservationSource):
    """Wraps cv2.VideoCapture to provide frames as FrameData objects."""

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def device_id(self) -> Union[int, str]:
        return self._opencv_config.device_id

    @property
    def is_file(self) -> bool:
        return isinstance(self.device_id, str) and os.path.exists(self.device_id)

    def open(self) -> None:
        if self._is_open:
            return

        cfg = self._opencv_config
        for attempt in range(1, cfg.max_retries + 1):
            self._cap = cv2.VideoCapture(self.device_id)
            if self._cap.isOpened():
                break
            self._cap.release()
            self._cap = None
            logging.warning(f"Failed to open device {self.device_id} (attempt {attempt}/{cfg.max_retries})")
            if attempt < cfg.max_retries:
                time.sleep(min(2 ** attempt, 10))
        else:
            raise RuntimeError(f"Failed to open device {self.device_id} after {cfg.max_retries} attempts")

        if isinstance(self.device_id, int) and cfg.resolution:
            w, h = cfg.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            if cfg.fps:
                self._cap.set(cv2.CAP_PROP_FPS, cfg.fps)

        self._is_open = True
        self._frame_index = 0
        logging.info(f"OpenCVSource opened: source_id={self.source_id}, device={self.device_id}")

    def read(self) -> Optional[FrameData]:
        if not self._is_open or self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            if self.is_file:
                logging.info("End of video file reached")
            return None

        if self._opencv_config.flip_horizontal:
            frame = cv2.flip(frame, 1)

        self._frame_index += 1
        return FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        self._is_open = False
        logging.info(f"OpenCVSource closed: source_id={self.source_id}")


def create_source_from_config(camera_cfg: Dict[str, Any], source_id: str = "camera") -> OpenCVSource:
    """Factory: build an OpenCVSource from the `camera` config section."""
    return OpenCVSource(OpenCVSourceConfig.from_camera_config(camera_cfg or {}, source_id=source_id))
