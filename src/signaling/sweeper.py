"""
Background expiry of abandoned negotiation records.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .store import NegotiationStore


class ExpirySweeper:
    """
    Periodically removes records untouched for longer than the retention window.

    Runs in a daemon thread owned by whoever owns the store (the web app
    lifespan). A missed or failed run only delays cleanup.
    """

    def __init__(
        self,
        store: NegotiationStore,
        interval_s: float = 3600.0,
        retention_s: float = 24 * 3600.0,
    ):
        self.store = store
        self.interval_s = interval_s
        self.retention_s = retention_s
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the sweep thread. Returns False if it is already running."""
        if self.is_running:
            return False
        self._stop.clear()
        self._thread = threading.Thread(target=self._worker, name="negotiation-sweeper")
        self._thread.daemon = True
        self._thread.start()
        logging.info(
            f"Expiry sweeper started (interval={self.interval_s}s, retention={self.retention_s}s)"
        )
        return True

    def stop(self, timeout: float = 10.0) -> None:
        """Stop the sweep thread and wait for it to exit."""
        self._stop.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            logging.info("Expiry sweeper stopped")
        self._thread = None

    def run_once(self, now: Optional[float] = None) -> int:
        return self.store.sweep(now=now, retention=self.retention_s)

    def _worker(self) -> None:
        while not self._stop.wait(self.interval_s):
            try:
                self.run_once()
            except Exception:
                logging.exception("Negotiation sweep failed")
