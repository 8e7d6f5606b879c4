"""
Negotiation record model held by the signaling store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class NegotiationRecord:
    """
    Pending negotiation state for one connection id.

    Payloads are opaque JSON values produced by the media negotiation library
    and are stored exactly as received.

    Attributes:
        key: Connection id shared by the two agents (case-sensitive).
        last_touched: Unix timestamp of the last mutating operation.
        offer: Session description published by the producer, if any.
        answer: Session description published by the consumer, if any.
        hints: Connectivity candidates in arrival order.
    """
    key: str
    last_touched: float
    offer: Optional[Any] = None
    answer: Optional[Any] = None
    hints: List[Any] = field(default_factory=list)

    def clear(self) -> None:
        self.offer = None
        self.answer = None
        self.hints = []

    def copy(self) -> "NegotiationRecord":
        """Shallow copy; the hint list is copied, payloads are shared."""
        return NegotiationRecord(
            key=self.key,
            last_touched=self.last_touched,
            offer=self.offer,
            answer=self.answer,
            hints=list(self.hints),
        )

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "last_touched": self.last_touched,
            "offer": self.offer,
            "answer": self.answer,
            "hints": list(self.hints),
        }
