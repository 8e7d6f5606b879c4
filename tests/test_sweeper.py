"""
Tests for the background expiry sweeper.
"""

import time
from unittest.mock import MagicMock

from signaling.store import NegotiationStore
from signaling.sweeper import ExpirySweeper

DAY = 24 * 3600.0


class TestRunOnce:
    def test_run_once_uses_retention(self, store, clock):
        sweeper = ExpirySweeper(store, interval_s=3600, retention_s=DAY)
        store.set_offer("old", {"sdp": "x"})
        clock.advance(DAY + 1)

        assert sweeper.run_once() == 1
        assert len(store) == 0

    def test_run_once_explicit_now(self, store, clock):
        sweeper = ExpirySweeper(store, retention_s=DAY)
        store.set_offer("k", {"sdp": "x"})

        assert sweeper.run_once(now=clock.now + DAY - 60) == 0
        assert sweeper.run_once(now=clock.now + DAY + 60) == 1


class TestThreadLifecycle:
    def test_start_and_stop(self):
        sweeper = ExpirySweeper(NegotiationStore(), interval_s=3600)

        assert sweeper.start() is True
        assert sweeper.is_running
        assert sweeper.start() is False  # already running

        sweeper.stop(timeout=2)
        assert not sweeper.is_running

    def test_periodic_sweep_runs(self):
        """With a tiny interval the worker sweeps repeatedly in the background."""
        store = MagicMock()
        store.sweep.return_value = 0
        sweeper = ExpirySweeper(store, interval_s=0.01, retention_s=DAY)

        sweeper.start()
        deadline = time.time() + 2
        while store.sweep.call_count < 2 and time.time() < deadline:
            time.sleep(0.01)
        sweeper.stop(timeout=2)

        assert store.sweep.call_count >= 2
        store.sweep.assert_called_with(now=None, retention=DAY)

    def test_sweep_failure_does_not_kill_worker(self):
        store = MagicMock()
        store.sweep.side_effect = RuntimeError("boom")
        sweeper = ExpirySweeper(store, interval_s=0.01)

        sweeper.start()
        deadline = time.time() + 2
        while store.sweep.call_count < 3 and time.time() < deadline:
            time.sleep(0.01)

        assert sweeper.is_running
        sweeper.stop(timeout=2)
        assert store.sweep.call_count >= 3

    def test_stop_without_start(self):
        sweeper = ExpirySweeper(NegotiationStore())
        sweeper.stop()
        assert not sweeper.is_running
