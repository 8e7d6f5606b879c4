"""
Observation source fed by the media channel.

The media layer that terminates the negotiated peer connection pushes decoded
frames here; the observation loop pulls them with read() like any camera.
"""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from typing import Optional

from models.frame import FrameData
from .base import ObservationConfig, ObservationSource


@dataclass
class PushedSourceConfig(ObservationConfig):
    """
    Attributes:
        max_pending: Frames buffered before the oldest is dropped.
        read_timeout_s: How long read() waits for a frame before returning None.
    """
    max_pending: int = 2
    read_timeout_s: float = 1.0


class PushedFrameSource(ObservationSource):
    """
    Bounded hand-off between a producer thread and the observation loop.

    When the loop falls behind, the oldest pending frame is dropped so the
    counter always works on recent pixels.
    """

    def __init__(self, config: Optional[PushedSourceConfig] = None):
        config = config or PushedSourceConfig(source_id="remote")
        super().__init__(config)
        self._pushed_config = config
        self._queue: queue.Queue = queue.Queue(maxsize=max(1, config.max_pending))
        self.dropped = 0

    def open(self) -> None:
        self._is_open = True
        self._frame_index = 0
        logging.info(f"PushedFrameSource opened: source_id={self.source_id}")

    def push(self, frame_data: FrameData) -> None:
        """Hand a frame to the loop. Never blocks the producer."""
        while True:
            try:
                self._queue.put_nowait(frame_data)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                    self.dropped += 1
                except queue.Empty:
                    pass

    def read(self) -> Optional[FrameData]:
        if not self._is_open:
            return None
        try:
            frame_data = self._queue.get(timeout=self._pushed_config.read_timeout_s)
        except queue.Empty:
            return None
        self._frame_index += 1
        return frame_data

    def close(self) -> None:
        self._is_open = False
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        logging.info(f"PushedFrameSource closed: source_id={self.source_id} (dropped={self.dropped})")
