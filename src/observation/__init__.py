"""
Observation layer for pluggable frame sources.

This layer abstracts where frames come from (camera, video file, remote
stream) from the observation loop. Each source implements the
ObservationSource interface and returns FrameData objects.
"""

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig, create_source_from_config
from .pushed_source import PushedFrameSource, PushedSourceConfig

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "create_source_from_config",
    "PushedFrameSource",
    "PushedSourceConfig",
]
