"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ServerConfig":
        return cls(
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"host": self.host, "port": self.port}


@dataclass
class SignalingConfig:
    """Rendezvous store retention and sweep cadence."""
    retention_hours: float = 24.0
    sweep_interval_s: float = 3600.0

    @property
    def retention_s(self) -> float:
        return self.retention_hours * 3600.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SignalingConfig":
        return cls(
            retention_hours=d.get("retention_hours", 24.0),
            sweep_interval_s=d.get("sweep_interval_s", 3600.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "retention_hours": self.retention_hours,
            "sweep_interval_s": self.sweep_interval_s,
        }


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [640, 480])
    fps: int = 30
    flip_horizontal: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [640, 480]),
            fps=d.get("fps", 30),
            flip_horizontal=d.get("flip_horizontal", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "flip_horizontal": self.flip_horizontal,
        }


@dataclass
class DetectionConfig:
    """YOLO detector configuration."""
    model: str = "yolov8n.pt"
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    classes: Optional[List[int]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            model=d.get("model", "yolov8n.pt"),
            conf_threshold=d.get("conf_threshold", 0.25),
            iou_threshold=d.get("iou_threshold", 0.45),
            classes=d.get("classes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "model": self.model,
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
        }
        if self.classes is not None:
            d["classes"] = self.classes
        return d


@dataclass
class TrackingConfig:
    """Deduplication tracker configuration."""
    confidence_threshold: float = 0.5
    tracked_class: str = "person"
    cooldown_s: float = 5.0
    grid_px: int = 1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackingConfig":
        return cls(
            confidence_threshold=d.get("confidence_threshold", 0.5),
            tracked_class=d.get("tracked_class", "person"),
            cooldown_s=d.get("cooldown_s", 5.0),
            grid_px=d.get("grid_px", 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confidence_threshold": self.confidence_threshold,
            "tracked_class": self.tracked_class,
            "cooldown_s": self.cooldown_s,
            "grid_px": self.grid_px,
        }


@dataclass
class PipelineConfig:
    """Observation loop settings."""
    max_consecutive_failures: int = 10
    stats_log_interval: float = 60.0
    retry_delay_s: float = 0.5

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PipelineConfig":
        return cls(
            max_consecutive_failures=d.get("max_consecutive_failures", 10),
            stats_log_interval=d.get("stats_log_interval", 60.0),
            retry_delay_s=d.get("retry_delay_s", 0.5),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_consecutive_failures": self.max_consecutive_failures,
            "stats_log_interval": self.stats_log_interval,
            "retry_delay_s": self.retry_delay_s,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    server: ServerConfig = field(default_factory=ServerConfig)
    signaling: SignalingConfig = field(default_factory=SignalingConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    log_path: str = "logs/pass_monitor.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            server=ServerConfig.from_dict(d.get("server", {}) or {}),
            signaling=SignalingConfig.from_dict(d.get("signaling", {}) or {}),
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            tracking=TrackingConfig.from_dict(d.get("tracking", {}) or {}),
            pipeline=PipelineConfig.from_dict(d.get("pipeline", {}) or {}),
            log_path=d.get("log_path", "logs/pass_monitor.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or logging)."""
        return {
            "server": self.server.to_dict(),
            "signaling": self.signaling.to_dict(),
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "tracking": self.tracking.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
