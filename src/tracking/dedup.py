"""
Detection deduplication tracker.

Turns per-frame detections into a count of distinct passing subjects. There
is no motion model: a subject's identity is its box origin quantized to the
grid, and that identity stays live for a fixed cool-down window. Within the
window, any detection at the same spatial key is treated as already counted.

Known limitations of position-as-identity:
- a subject that moves more than one grid step inside the window is counted again
- two subjects whose origins quantize to the same key inside the window count once
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from models.count_event import CountEvent
from models.detection import BoundingBox, Detection

SpatialKey = Tuple[int, int]


@dataclass
class DedupConfig:
    """
    Configuration for the deduplication tracker.

    Attributes:
        confidence_threshold: Detections scoring below this are ignored entirely.
        tracked_class: Label whose detections are counted.
        cooldown_s: Lifetime of an identity after it is first counted.
        grid_px: Quantization step for the box origin (1 = round to integer pixels).
    """
    confidence_threshold: float = 0.5
    tracked_class: str = "person"
    cooldown_s: float = 5.0
    grid_px: int = 1

    @classmethod
    def from_dict(cls, d: Dict) -> "DedupConfig":
        return cls(
            confidence_threshold=float(d.get("confidence_threshold", 0.5)),
            tracked_class=str(d.get("tracked_class", "person")),
            cooldown_s=float(d.get("cooldown_s", 5.0)),
            grid_px=int(d.get("grid_px", 1)),
        )


@dataclass(frozen=True)
class TrackedIdentity:
    spatial_key: SpatialKey
    expires_at: float


@dataclass(frozen=True)
class Annotation:
    """A draw command for one detection that passed the confidence filter."""
    bbox: BoundingBox
    label: str
    confidence: float

    @property
    def text(self) -> str:
        return f"{self.label}: {_round_half_up(self.confidence * 100)}%"


@dataclass
class TrackerUpdate:
    """Result of processing one frame."""
    annotations: List[Annotation] = field(default_factory=list)
    events: List[CountEvent] = field(default_factory=list)
    object_counts: Dict[str, int] = field(default_factory=dict)
    total: int = 0

    @property
    def new_count(self) -> int:
        return len(self.events)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class DedupTracker:
    """
    Counts each tracked-class subject once per cool-down window.

    Expiry is evaluated at the start of every process() call using the
    caller-supplied time, so there are no timers to cancel and expiry never
    races with creation.

    Example:
        tracker = DedupTracker(DedupConfig())
        update = tracker.process(detections, now=frame.timestamp)
        print(tracker.count, update.object_counts)
    """

    def __init__(self, config: Optional[DedupConfig] = None):
        self.config = config or DedupConfig()
        if self.config.grid_px <= 0:
            raise ValueError("grid_px must be a positive integer")
        self._identities: Dict[SpatialKey, TrackedIdentity] = {}
        self._count = 0

    @property
    def count(self) -> int:
        """Distinct subjects counted since creation or the last reset()."""
        return self._count

    def spatial_key(self, bbox: BoundingBox) -> SpatialKey:
        step = self.config.grid_px
        return (_round_half_up(bbox.x / step), _round_half_up(bbox.y / step))

    def live_identities(self) -> List[TrackedIdentity]:
        return list(self._identities.values())

    def is_live(self, key: SpatialKey, now: float) -> bool:
        identity = self._identities.get(key)
        return identity is not None and identity.expires_at > now

    def expire(self, now: float) -> int:
        """Forget identities whose window has closed. Returns how many were dropped."""
        stale = [key for key, ident in self._identities.items() if ident.expires_at <= now]
        for key in stale:
            del self._identities[key]
        return len(stale)

    def reset(self) -> None:
        self._identities.clear()
        self._count = 0

    def process(self, detections: Iterable[Detection], now: float) -> TrackerUpdate:
        """
        Process one frame of detections.

        Args:
            detections: Detections for a single frame.
            now: Frame time in seconds (same clock across calls).

        Returns:
            TrackerUpdate with overlay annotations, new count events and the
            per-class tally of detections above the confidence threshold.
        """
        self.expire(now)

        update = TrackerUpdate()
        tally: Counter = Counter()
        cfg = self.config

        for det in detections:
            if det.confidence < cfg.confidence_threshold:
                continue

            tally[det.label] += 1
            update.annotations.append(
                Annotation(bbox=det.bbox, label=det.label, confidence=det.confidence)
            )

            if det.label != cfg.tracked_class:
                continue

            key = self.spatial_key(det.bbox)
            if key in self._identities:
                continue

            self._identities[key] = TrackedIdentity(spatial_key=key, expires_at=now + cfg.cooldown_s)
            self._count += 1
            event = CountEvent(
                spatial_key=key,
                label=det.label,
                confidence=det.confidence,
                timestamp=now,
                total=self._count,
            )
            update.events.append(event)
            logging.debug(f"New {det.label} at {key}: total={self._count}")

        update.object_counts = dict(tally)
        update.total = self._count
        return update


def create_tracker_from_config(tracking_cfg: Dict) -> DedupTracker:
    """Factory: build a DedupTracker from the `tracking` config section."""
    return DedupTracker(DedupConfig.from_dict(tracking_cfg or {}))
