"""
CountEvent model for a newly counted passing subject.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CountEvent:
    """
    Emitted when the tracker sees a tracked-class detection at a spatial key
    with no live identity.

    Attributes:
        spatial_key: Quantized box origin that identified the subject.
        label: Class label that was counted.
        confidence: Confidence of the detection that triggered the count.
        timestamp: Time the subject was first seen (tracker clock).
        total: Running count after this event.
    """
    spatial_key: Tuple[int, int]
    label: str
    confidence: float
    timestamp: float
    total: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "spatial_key": list(self.spatial_key),
            "label": self.label,
            "confidence": self.confidence,
            "timestamp": self.timestamp,
            "total": self.total,
        }
