"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


class FakeClock:
    """Manually advanced clock for store and sweeper tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    from signaling.store import NegotiationStore
    return NegotiationStore(clock=clock)


@pytest.fixture
def web_state():
    """The shared web state singleton, cleared before and after each test."""
    from web.state import state
    state.reset()
    yield state
    state.reset()


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
server:
  host: "127.0.0.1"
  port: 5000

signaling:
  retention_hours: 24
  sweep_interval_s: 3600

tracking:
  confidence_threshold: 0.5
  tracked_class: "person"
  cooldown_s: 5.0

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "server": {"host": "127.0.0.1", "port": 5000},
        "signaling": {"retention_hours": 24, "sweep_interval_s": 3600},
        "camera": {"device_id": 0, "resolution": [640, 480], "fps": 30},
        "detection": {"model": "yolov8n.pt", "conf_threshold": 0.25},
        "tracking": {
            "confidence_threshold": 0.5,
            "tracked_class": "person",
            "cooldown_s": 5.0,
            "grid_px": 1,
        },
        "pipeline": {"max_consecutive_failures": 10},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
