"""
Observation loop for the pass monitor.

Reads frames from an ObservationSource one at a time, runs inference, feeds
the detections to the deduplication tracker, draws the overlay and publishes
the annotated frame and counts to the shared web state.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import cv2
import numpy as np

from inference.backend import InferenceBackend
from models.config import PipelineConfig
from models.frame import FrameData
from observation import ObservationSource, create_source_from_config
from tracking.dedup import Annotation, DedupTracker, TrackerUpdate, create_tracker_from_config

DETECTION_FAILED_NOTICE = "Detection failed"

# Colors (BGR)
COLOR_BOX = (255, 255, 0)  # Cyan
COLOR_TOTAL = (0, 0, 255)  # Red


@dataclass
class LoopStats:
    """Runtime statistics for the observation loop."""
    frame_count: int = 0
    failed_frames: int = 0
    people_count: int = 0
    object_counts: Dict[str, int] = field(default_factory=dict)
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    consecutive_failures: int = 0


class ObservationLoop:
    """
    Single-path frame processing loop bound to a cancellation event.

    Frames are processed strictly in arrival order with no overlap; a slow
    frame delays the next one. stop() prevents any further frame from being
    processed. Identity expiry lives inside the tracker and is evaluated per
    frame, so nothing is left scheduled after the loop ends.

    Example:
        loop = ObservationLoop(source, detector, tracker, PipelineConfig(), web_state=state)
        loop.start()
        ...
        loop.stop()
        loop.join()
    """

    def __init__(
        self,
        source: ObservationSource,
        detector: InferenceBackend,
        tracker: DedupTracker,
        config: Optional[PipelineConfig] = None,
        web_state: Any = None,
    ):
        self.source = source
        self.detector = detector
        self.tracker = tracker
        self.config = config or PipelineConfig()
        self.web_state = web_state
        self.stats = LoopStats()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._callbacks: List[Callable[[FrameData, TrackerUpdate], None]] = []

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def add_callback(self, callback: Callable[[FrameData, TrackerUpdate], None]) -> None:
        """
        Add a callback to be called after each frame is processed.

        Args:
            callback: Function taking (frame_data, update) as arguments.
        """
        self._callbacks.append(callback)

    def start(self) -> None:
        """Run the loop in a background thread."""
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="observation-loop", daemon=True)
        self._thread.start()

    def run(self) -> None:
        """Run the loop in the calling thread until stopped or the source is exhausted."""
        self._stop.clear()
        self._run()

    def stop(self) -> None:
        """Signal the loop to stop after the current frame."""
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def _run(self) -> None:
        self.stats = LoopStats()

        try:
            self.source.open()
            logging.info(f"Observation loop started: source={self.source.source_id}")

            while not self._stop.is_set():
                frame_data = self.source.read()

                if frame_data is None:
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    self._stop.wait(self.config.retry_delay_s)
                    continue

                self.stats.consecutive_failures = 0
                update = self.process_frame(frame_data)
                if update is None:
                    continue

                for callback in self._callbacks:
                    try:
                        callback(frame_data, update)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                self._handle_periodic_tasks()

        except Exception:
            logging.exception("Observation loop error")
        finally:
            self._cleanup()

    def process_frame(self, frame_data: FrameData) -> Optional[TrackerUpdate]:
        """
        Process a single frame through detection, deduplication and overlay.

        Returns None if inference failed for this frame.
        """
        self.stats.frame_count += 1

        try:
            detections = self.detector.detect(frame_data.frame)
        except Exception as e:
            self.stats.failed_frames += 1
            logging.warning(f"Detection failed on frame {frame_data.frame_index}: {e}")
            if self.web_state is not None:
                self.web_state.report_error(DETECTION_FAILED_NOTICE)
            return None

        update = self.tracker.process(detections, now=frame_data.timestamp)

        self.stats.people_count = update.total
        self.stats.object_counts = update.object_counts
        for event in update.events:
            logging.info(f"Person counted at {event.spatial_key}: total={event.total}")

        annotated = draw_annotations(frame_data.frame.copy(), update.annotations, total=update.total)

        if self.web_state is not None:
            self.web_state.clear_error()
            self.web_state.set_frame(annotated)
            self.web_state.update_observation(update.total, update.object_counts)

        return update

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            elapsed = max(now - self.stats.start_time, 1e-6)
            fps = self.stats.frame_count / elapsed
            logging.info(
                f"Observation stats: frames={self.stats.frame_count}, "
                f"failed={self.stats.failed_frames}, people={self.stats.people_count}, "
                f"fps={fps:.1f}"
            )
            if self.web_state is not None:
                self.web_state.update_system_stats({"fps": fps})
            self.stats.last_stats_log_time = now

    def _cleanup(self) -> None:
        self._stop.set()
        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")
        logging.info("Observation loop stopped")


def draw_annotations(frame: np.ndarray, annotations: List[Annotation], total: Optional[int] = None) -> np.ndarray:
    """Draw detection boxes with "label: NN%" captions, plus the running total."""
    font = cv2.FONT_HERSHEY_SIMPLEX
    for ann in annotations:
        x1, y1, x2, y2 = ann.bbox.as_int_xyxy()
        cv2.rectangle(frame, (x1, y1), (x2, y2), COLOR_BOX, 2)
        text_y = y1 - 5 if y1 > 10 else 10
        cv2.putText(frame, ann.text, (x1, text_y), font, 0.6, COLOR_BOX, 2)

    if total is not None:
        cv2.putText(frame, f"Passed: {total}", (10, 30), font, 1, COLOR_TOTAL, 2)
    return frame


def create_loop_from_config(
    config: Dict[str, Any],
    detector: InferenceBackend,
    web_state: Any = None,
    source: Optional[ObservationSource] = None,
) -> ObservationLoop:
    """
    Factory: build an ObservationLoop from the full application config dict.

    Args:
        config: Full application config dict.
        detector: Inference backend to run on each frame.
        web_state: Shared state that receives frames and counts.
        source: Optional source override (defaults to the `camera` section).
    """
    if source is None:
        source = create_source_from_config(config.get("camera", {}), source_id="camera")
    tracker = create_tracker_from_config(config.get("tracking", {}))
    pipeline_cfg = PipelineConfig.from_dict(config.get("pipeline", {}) or {})
    return ObservationLoop(source, detector, tracker, pipeline_cfg, web_state=web_state)
