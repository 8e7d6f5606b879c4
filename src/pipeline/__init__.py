"""
Pipeline module for the pass monitor.

The observation loop orchestrates:
- Frame acquisition from observation sources
- Inference
- De-duplicated counting (tracking.dedup)
- Overlay drawing and web state updates
"""

from .engine import ObservationLoop, LoopStats, draw_annotations, create_loop_from_config

__all__ = [
    "ObservationLoop",
    "LoopStats",
    "draw_annotations",
    "create_loop_from_config",
]
