"""
Detection models for per-frame object detector output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in pixel coordinates.

    Attributes:
        x: Left edge (box origin) x coordinate.
        y: Top edge (box origin) y coordinate.
        width: Box width in pixels.
        height: Box height in pixels.
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def origin(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def as_int_xyxy(self) -> Tuple[int, int, int, int]:
        """Return as integer (x1, y1, x2, y2) tuple for drawing."""
        return (int(self.x), int(self.y), int(self.x2), int(self.y2))

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Create from corner coordinates."""
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    @classmethod
    def from_sequence(cls, bbox: Sequence[float]) -> "BoundingBox":
        """Create from an [x, y, width, height] sequence."""
        return cls(x=float(bbox[0]), y=float(bbox[1]), width=float(bbox[2]), height=float(bbox[3]))


@dataclass(frozen=True)
class Detection:
    """
    A single detection from an object detector.

    Attributes:
        label: Class label (e.g. "person", "car").
        confidence: Detection confidence score (0-1).
        bbox: Bounding box in pixel coordinates.
        class_id: Optional numeric class ID from the detector.
    """
    label: str
    confidence: float
    bbox: BoundingBox
    class_id: Optional[int] = None

    @classmethod
    def from_xywh(
        cls,
        label: str,
        confidence: float,
        x: float,
        y: float,
        w: float,
        h: float,
        class_id: Optional[int] = None,
    ) -> "Detection":
        return cls(
            label=label,
            confidence=confidence,
            bbox=BoundingBox(x=x, y=y, width=w, height=h),
            class_id=class_id,
        )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Detection":
        """
        Adapter: build from a detector payload of the form
        {"class": "person", "score": 0.9, "bbox": [x, y, w, h]}.

        Raises:
            KeyError: If the payload has no class label or no bbox.
        """
        label = d.get("class") or d.get("label")
        if not label:
            raise KeyError("class")
        return cls(
            label=str(label),
            confidence=float(d.get("score", d.get("confidence", 0.0))),
            bbox=BoundingBox.from_sequence(d["bbox"]),
            class_id=d.get("class_id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class": self.label,
            "score": self.confidence,
            "bbox": [self.bbox.x, self.bbox.y, self.bbox.width, self.bbox.height],
        }


def detections_from_dicts(items: List[Dict[str, Any]]) -> List[Detection]:
    """Adapter: convert a list of detector payload dicts to Detection objects."""
    if not items:
        return []
    return [Detection.from_dict(item) for item in items]
