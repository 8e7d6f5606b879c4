"""
Tracking module.

The canonical tracker implementation is in tracking.dedup.
"""

from .dedup import (
    Annotation,
    DedupConfig,
    DedupTracker,
    TrackedIdentity,
    TrackerUpdate,
    create_tracker_from_config,
)

__all__ = [
    "Annotation",
    "DedupConfig",
    "DedupTracker",
    "TrackedIdentity",
    "TrackerUpdate",
    "create_tracker_from_config",
]
