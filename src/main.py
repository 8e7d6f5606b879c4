"""
Pass monitor entry point.

Serves the signaling endpoint that pairs a remote camera with an observer, and
optionally runs the observation loop that counts people passing a local camera.

Usage:
    python src/main.py --config config/config.yaml

Arguments:
    --config: Path to configuration file
    --no-observe: Serve the signaling endpoint only (no camera, no model)
    --host / --port: Override server.host / server.port
"""

import os
import sys
import argparse
import logging
import time
from typing import Any, Dict, Optional, Tuple

import yaml
import uvicorn

from inference.cpu_backend import CpuYoloConfig, UltralyticsCpuBackend
from models.config import Config
from ops.logging import setup_logging
from pipeline.engine import ObservationLoop, create_loop_from_config
from web.app import create_app
from web.state import state as web_state

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        config_dir = os.path.dirname(config_path)
        base_path = os.path.join(config_dir, "default.yaml")
        merged = _read_yaml(base_path) if os.path.exists(base_path) else {}

        local_overrides_path = os.path.join(config_dir, "config.yaml")
        if os.path.exists(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(local_overrides_path))

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            merged = _deep_merge(merged, _read_yaml(config_path))

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    for section in ['log_path', 'log_level']:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    server = config.get('server', {}) or {}
    if 'port' in server:
        port = server['port']
        if not isinstance(port, int) or not (0 < port < 65536):
            return False, "server.port must be an integer between 1 and 65535"

    signaling = config.get('signaling', {}) or {}
    for name in ('retention_hours', 'sweep_interval_s'):
        if name in signaling and (not _is_number(signaling[name]) or signaling[name] <= 0):
            return False, f"signaling.{name} must be a positive number"

    camera = config.get('camera', {}) or {}
    if 'device_id' in camera:
        device_id = camera['device_id']
        if not isinstance(device_id, (int, str)) or isinstance(device_id, bool):
            return False, "camera.device_id must be an integer (index) or string (URL/path)"
        if isinstance(device_id, int) and device_id < 0:
            return False, "camera.device_id integer must be non-negative"
    if 'resolution' in camera:
        res = camera['resolution']
        if not isinstance(res, list) or len(res) != 2 or not all(isinstance(x, int) and x > 0 for x in res):
            return False, "camera.resolution must be a list of two positive integers"

    detection = config.get('detection', {}) or {}
    if 'model' in detection and (not isinstance(detection['model'], str) or not detection['model']):
        return False, "detection.model must be a non-empty string"

    tracking = config.get('tracking', {}) or {}
    if 'confidence_threshold' in tracking:
        thr = tracking['confidence_threshold']
        if not _is_number(thr) or not (0 <= thr <= 1):
            return False, "tracking.confidence_threshold must be between 0 and 1"
    if 'cooldown_s' in tracking and (not _is_number(tracking['cooldown_s']) or tracking['cooldown_s'] <= 0):
        return False, "tracking.cooldown_s must be a positive number"
    if 'grid_px' in tracking and (not isinstance(tracking['grid_px'], int) or tracking['grid_px'] <= 0):
        return False, "tracking.grid_px must be a positive integer"
    if 'tracked_class' in tracking and (not isinstance(tracking['tracked_class'], str) or not tracking['tracked_class']):
        return False, "tracking.tracked_class must be a non-empty string"

    pipeline = config.get('pipeline', {}) or {}
    if 'max_consecutive_failures' in pipeline:
        mcf = pipeline['max_consecutive_failures']
        if not isinstance(mcf, int) or mcf <= 0:
            return False, "pipeline.max_consecutive_failures must be a positive integer"

    return True, None


def build_observation_loop(config: Dict[str, Any]) -> ObservationLoop:
    """Create the detector and the observation loop for the local camera."""
    detection = Config.from_dict(config).detection
    detector = UltralyticsCpuBackend(
        CpuYoloConfig(
            model=detection.model,
            conf_threshold=float(detection.conf_threshold),
            iou_threshold=float(detection.iou_threshold),
            classes=detection.classes,
        )
    )
    return create_loop_from_config(config, detector, web_state=web_state)


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Pass Monitor - camera rendezvous and people counting')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--no-observe', action='store_true',
                        help='Serve the signaling endpoint only')
    parser.add_argument('--host', type=str, default=None, help='Override server.host')
    parser.add_argument('--port', type=int, default=None, help='Override server.port')
    args = parser.parse_args()

    config = load_config(args.config)

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(config['log_path'], config['log_level'])
    typed = Config.from_dict(config)
    host = args.host or typed.server.host
    port = args.port or typed.server.port

    logging.info("Starting Pass Monitor")
    web_state.update_system_stats({"start_time": time.time()})

    loop: Optional[ObservationLoop] = None
    if not args.no_observe:
        try:
            loop = build_observation_loop(config)
            loop.start()
            logging.info("Observation loop started")
        except ImportError as e:
            logging.error(f"Observation disabled: {e}")
            loop = None

    try:
        logging.info(f"Web interface starting on {host}:{port}")
        uvicorn.run(create_app(config), host=host, port=port, log_level="info")
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    finally:
        if loop is not None:
            loop.stop()
            loop.join(timeout=5)
        logging.info("Pass Monitor stopped")


if __name__ == "__main__":
    main()
