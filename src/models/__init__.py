"""
Typed models for the pass monitor.

Use the adapter classmethods to convert from config dicts and detector payloads.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .count_event import CountEvent
from .negotiation import NegotiationRecord
from .config import (
    Config,
    ServerConfig,
    SignalingConfig,
    CameraConfig,
    DetectionConfig,
    TrackingConfig,
    PipelineConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # Counting
    "CountEvent",
    # Signaling
    "NegotiationRecord",
    # Config
    "Config",
    "ServerConfig",
    "SignalingConfig",
    "CameraConfig",
    "DetectionConfig",
    "TrackingConfig",
    "PipelineConfig",
]
