"""
Rendezvous (signaling) layer: record store, protocol handler, expiry sweeper,
and the agent-side polling client.
"""

from .store import NegotiationStore
from .protocol import Operation, SignalingHandler, SignalingResult
from .sweeper import ExpirySweeper
from .client import SignalingClient, SignalingError, SignalingTimeout

__all__ = [
    "NegotiationStore",
    "Operation",
    "SignalingHandler",
    "SignalingResult",
    "ExpirySweeper",
    "SignalingClient",
    "SignalingError",
    "SignalingTimeout",
]
