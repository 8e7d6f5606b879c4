"""
Tests for observation sources (OpenCV VideoCapture is mocked).
"""

from unittest.mock import MagicMock

import numpy as np
import pytest

from models.config import PipelineConfig
from models.detection import Detection
from models.frame import FrameData
from observation import opencv_source
from observation.opencv_source import OpenCVSource, OpenCVSourceConfig, create_source_from_config
from observation.pushed_source import PushedFrameSource, PushedSourceConfig
from pipeline.engine import ObservationLoop
from tracking.dedup import DedupTracker


@pytest.fixture
def fake_capture(monkeypatch):
    cap = MagicMock()
    cap.isOpened.return_value = True
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    frame[:, 0] = 255
    cap.read.side_effect = [(True, frame), (True, frame), (False, None)]
    monkeypatch.setattr(opencv_source.cv2, "VideoCapture", MagicMock(return_value=cap))
    return cap


class TestOpenCVSourceConfig:
    def test_from_camera_config(self):
        cfg = OpenCVSourceConfig.from_camera_config(
            {"device_id": "video.mp4", "resolution": [320, 240], "fps": 15, "flip_horizontal": True},
            source_id="cam",
        )

        assert cfg.source_id == "cam"
        assert cfg.resolution == (320, 240)
        assert cfg.device_id == "video.mp4"
        assert cfg.flip_horizontal is True

    def test_factory_defaults(self):
        source = create_source_from_config({})

        assert source.device_id == 0
        assert source.source_id == "camera"


class TestOpenCVSource:
    def test_reads_frames_until_exhausted(self, fake_capture):
        source = OpenCVSource(OpenCVSourceConfig(source_id="cam", device_id=0))

        with source:
            frames = list(source)

        assert [f.frame_index for f in frames] == [1, 2]
        assert frames[0].size == (640, 480)
        assert frames[0].source == "cam"
        assert not source.is_open
        fake_capture.release.assert_called_once()

    def test_flip_horizontal(self, fake_capture):
        source = OpenCVSource(OpenCVSourceConfig(device_id=0, flip_horizontal=True))
        source.open()

        frame_data = source.read()

        assert frame_data.frame[:, -1].max() == 255
        assert frame_data.frame[:, 0].max() == 0
        source.close()

    def test_applies_resolution(self, fake_capture):
        source = OpenCVSource(OpenCVSourceConfig(device_id=0, resolution=(320, 240), fps=10))
        source.open()

        assert fake_capture.set.call_count == 3
        source.close()

    def test_open_failure(self, monkeypatch):
        cap = MagicMock()
        cap.isOpened.return_value = False
        monkeypatch.setattr(opencv_source.cv2, "VideoCapture", MagicMock(return_value=cap))
        source = OpenCVSource(OpenCVSourceConfig(device_id=3, max_retries=1))

        with pytest.raises(RuntimeError):
            source.open()

    def test_read_before_open(self):
        source = OpenCVSource(OpenCVSourceConfig())
        assert source.read() is None

    def test_iterate_requires_open(self):
        source = OpenCVSource(OpenCVSourceConfig())
        with pytest.raises(RuntimeError):
            next(iter(source))


class TestPushedFrameSource:
    def _frame(self, index):
        return FrameData.from_numpy(np.zeros((4, 4, 3), dtype=np.uint8), timestamp=float(index), frame_index=index)

    def test_frames_read_in_push_order(self):
        source = PushedFrameSource(PushedSourceConfig(max_pending=4, read_timeout_s=0.01))

        with source:
            source.push(self._frame(1))
            source.push(self._frame(2))
            assert source.read().timestamp == 1.0
            assert source.read().timestamp == 2.0
            assert source.read() is None
            assert source.frame_index == 2

    def test_oldest_frame_dropped_when_full(self):
        source = PushedFrameSource(PushedSourceConfig(max_pending=2, read_timeout_s=0.01))
        source.open()

        for i in range(1, 5):
            source.push(self._frame(i))

        assert source.dropped == 2
        assert [source.read().timestamp, source.read().timestamp] == [3.0, 4.0]
        source.close()

    def test_read_when_closed(self):
        source = PushedFrameSource()
        source.push(self._frame(1))

        assert source.read() is None

    def test_feeds_observation_loop(self, web_state):
        source = PushedFrameSource(PushedSourceConfig(read_timeout_s=0.01))
        source.push(self._frame(0))
        detector = MagicMock()
        detector.detect.return_value = [Detection.from_xywh("person", 0.9, 10, 10, 5, 5)]
        loop = ObservationLoop(
            source, detector, DedupTracker(),
            PipelineConfig(max_consecutive_failures=1, retry_delay_s=0),
            web_state=web_state,
        )

        loop.run()

        assert loop.stats.people_count == 1
