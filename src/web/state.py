import threading
import time
from typing import Dict, Optional

import numpy as np


class SharedState:
    """
    Singleton class to share state between the observation loop
    and the FastAPI web server.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SharedState, cls).__new__(cls)
                    cls._instance._init_fields()
        return cls._instance

    def _init_fields(self):
        self.frame = None
        self.frame_lock = threading.Lock()
        self.data_lock = threading.Lock()
        self.people_count = 0
        self.object_counts: Dict[str, int] = {}
        self.last_error: Optional[str] = None
        self.last_error_ts: Optional[float] = None
        self.system_stats = {
            "fps": 0,
            "start_time": 0,
            "last_frame_ts": None,
        }

    def reset(self):
        """Clear all observation data (used on loop restart and in tests)."""
        with self.frame_lock, self.data_lock:
            self._init_fields()

    def set_frame(self, frame: np.ndarray):
        """Update the latest annotated frame."""
        with self.frame_lock:
            if frame is not None:
                self.frame = frame.copy()
                self.system_stats["last_frame_ts"] = time.time()

    def get_frame(self) -> Optional[np.ndarray]:
        with self.frame_lock:
            if self.frame is None:
                return None
            return self.frame.copy()

    def update_observation(self, people_count: int, object_counts: Dict[str, int]):
        with self.data_lock:
            self.people_count = people_count
            self.object_counts = dict(object_counts)

    def get_observation(self):
        """Return (people_count, object_counts copy)."""
        with self.data_lock:
            return self.people_count, dict(self.object_counts)

    def report_error(self, message: str):
        with self.data_lock:
            self.last_error = message
            self.last_error_ts = time.time()

    def clear_error(self):
        with self.data_lock:
            self.last_error = None
            self.last_error_ts = None

    def update_system_stats(self, stats):
        self.system_stats.update(stats)

    def get_system_stats_copy(self):
        """Return a shallow copy of current system stats."""
        return dict(self.system_stats)

# Global instance
state = SharedState()
