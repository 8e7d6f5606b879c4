"""
Request/response handler for the rendezvous (signaling) protocol.

The handler is stateless: each call is one bounded store operation. The
offer -> answer -> candidates sequence is driven by the two agents themselves
(see signaling.client).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .store import NegotiationStore


class Operation(str, Enum):
    """Operation tags accepted on the wire."""
    OFFER = "offer"
    ANSWER = "answer"
    CANDIDATE = "candidate"
    GET_OFFER = "get-offer"
    GET_ANSWER = "get-answer"
    GET_CANDIDATES = "get-candidates"
    RESET = "reset"

    @property
    def is_publish(self) -> bool:
        return self in (Operation.OFFER, Operation.ANSWER, Operation.CANDIDATE)

    @classmethod
    def parse(cls, value: Any) -> Optional["Operation"]:
        """Return the matching Operation, or None for an unknown tag."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class SignalingResult:
    """HTTP-shaped outcome of one protocol call."""
    body: Dict[str, Any] = field(default_factory=dict)
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


SUCCESS = SignalingResult(body={"success": True})


class SignalingHandler:
    """
    Dispatches protocol operations onto a NegotiationStore.

    Fetches of data that has not been published yet are answered with
    null / [] so that pollers can tell "not ready" from "request failed".
    No authentication: the connection id itself pairs the two agents.
    """

    def __init__(self, store: NegotiationStore):
        self.store = store

    def handle(self, operation: Any, key: str, payload: Any = None) -> SignalingResult:
        op = Operation.parse(operation)
        if op is None:
            logging.warning(f"Rejected signaling request: invalid type {operation!r} (key={key!r})")
            return SignalingResult(body={"error": "Invalid type"}, status_code=400)

        if op.is_publish and payload is None:
            logging.warning(f"Rejected signaling request: {op.value} without payload (key={key!r})")
            return SignalingResult(body={"error": "Missing payload"}, status_code=400)

        logging.debug(f"Signaling {op.value}: key={key!r}")
        self.store.ensure(key)

        if op is Operation.OFFER:
            self.store.set_offer(key, payload)
            return SUCCESS
        if op is Operation.ANSWER:
            self.store.set_answer(key, payload)
            return SUCCESS
        if op is Operation.CANDIDATE:
            self.store.append_hint(key, payload)
            return SUCCESS
        if op is Operation.GET_OFFER:
            return SignalingResult(body={"offer": self.store.get_offer(key)})
        if op is Operation.GET_ANSWER:
            return SignalingResult(body={"answer": self.store.get_answer(key)})
        if op is Operation.GET_CANDIDATES:
            return SignalingResult(body={"candidates": self.store.get_hints(key)})

        self.store.reset(key)
        logging.info(f"Signaling session reset: key={key!r}")
        return SUCCESS
