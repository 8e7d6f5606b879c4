"""
In-memory negotiation record store.

Records are keyed by connection id. A short map lock guards only the
key -> entry dictionary; each entry has its own lock, held for the duration of
one operation, so traffic on one connection id never waits on another.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from models.negotiation import NegotiationRecord


@dataclass
class _Entry:
    record: NegotiationRecord
    lock: threading.Lock = field(default_factory=threading.Lock)
    # Set under `lock` when the sweeper removes the entry from the map.
    removed: bool = False


class NegotiationStore:
    """
    Process-wide keyed storage for pending offer/answer/candidate exchanges.

    Mutating operations stamp `last_touched`; reads never do. Reads on an
    unknown key return None / [] rather than raising. Nothing blocks waiting
    for data: polling is the caller's job.

    Example:
        store = NegotiationStore()
        store.set_offer("camera1", {"type": "offer", "sdp": "..."})
        store.get_offer("camera1")
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._map_lock = threading.Lock()

    def __len__(self) -> int:
        with self._map_lock:
            return len(self._entries)

    def keys(self) -> List[str]:
        with self._map_lock:
            return list(self._entries)

    def contains(self, key: str) -> bool:
        with self._map_lock:
            return key in self._entries

    def _lookup(self, key: str) -> Optional[_Entry]:
        with self._map_lock:
            return self._entries.get(key)

    def _get_or_create(self, key: str) -> _Entry:
        with self._map_lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = _Entry(record=NegotiationRecord(key=key, last_touched=self._clock()))
                self._entries[key] = entry
                logging.debug(f"Negotiation record created: key={key!r}")
            return entry

    def _mutate(self, key: str, fn: Callable[[NegotiationRecord], None]) -> None:
        """Apply fn to the live record for key under its lock, then stamp it."""
        while True:
            entry = self._get_or_create(key)
            with entry.lock:
                if entry.removed:
                    # Swept between lookup and lock; resolve the key again.
                    continue
                fn(entry.record)
                entry.record.last_touched = self._clock()
                return

    def _read(self, key: str, fn: Callable[[NegotiationRecord], Any], default: Any) -> Any:
        entry = self._lookup(key)
        if entry is None:
            return default
        with entry.lock:
            if entry.removed:
                return default
            return fn(entry.record)

    # --- mutating operations ---

    def ensure(self, key: str) -> None:
        """Create the record if missing; an existing record is not re-stamped."""
        self._get_or_create(key)

    def touch(self, key: str) -> NegotiationRecord:
        """Create the record if missing, stamp it, and return a copy."""
        result: List[NegotiationRecord] = []
        self._mutate(key, lambda record: result.append(record))
        return result[0].copy()

    def set_offer(self, key: str, payload: Any) -> None:
        def apply(record: NegotiationRecord) -> None:
            record.offer = payload
        self._mutate(key, apply)

    def set_answer(self, key: str, payload: Any) -> None:
        def apply(record: NegotiationRecord) -> None:
            record.answer = payload
        self._mutate(key, apply)

    def append_hint(self, key: str, payload: Any) -> None:
        self._mutate(key, lambda record: record.hints.append(payload))

    def reset(self, key: str) -> None:
        """Discard offer, answer and hints in one step; the record stays."""
        self._mutate(key, lambda record: record.clear())

    # --- reads ---

    def get_offer(self, key: str) -> Optional[Any]:
        return self._read(key, lambda record: record.offer, None)

    def get_answer(self, key: str) -> Optional[Any]:
        return self._read(key, lambda record: record.answer, None)

    def get_hints(self, key: str) -> List[Any]:
        """Snapshot of the hint list in insertion order. Does not consume."""
        return self._read(key, lambda record: list(record.hints), [])

    def snapshot(self, key: str) -> Optional[NegotiationRecord]:
        return self._read(key, lambda record: record.copy(), None)

    # --- housekeeping ---

    def sweep(self, now: Optional[float] = None, retention: float = 24 * 3600.0) -> int:
        """
        Remove every record untouched for longer than `retention` seconds.

        Args:
            now: Reference time (defaults to the store clock).
            retention: Retention window in seconds.

        Returns:
            Number of records removed.
        """
        if now is None:
            now = self._clock()

        removed = 0
        for key in self.keys():
            entry = self._lookup(key)
            if entry is None:
                continue
            with entry.lock:
                if entry.removed or now - entry.record.last_touched <= retention:
                    continue
                with self._map_lock:
                    if self._entries.get(key) is entry:
                        del self._entries[key]
                entry.removed = True
                removed += 1

        if removed:
            logging.info(f"Swept {removed} stale negotiation record(s)")
        return removed
