"""
Vision inference backends.
"""

from .backend import InferenceBackend
from .cpu_backend import CpuYoloConfig, UltralyticsCpuBackend

__all__ = ["InferenceBackend", "CpuYoloConfig", "UltralyticsCpuBackend"]
