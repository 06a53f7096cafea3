"""
Main application for the object detection monitor.

Serves the detection API, or runs a one-shot detection on a still image.

Usage:
    python src/main.py --config config/config.yaml
    python src/main.py --image photo.jpg --output output/annotated

Arguments:
    --config: Path to configuration file
    --image: Detect once on this image and exit (no server)
    --output: Directory for the annotated image in --image mode
    --host / --port: Override the web server address
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import uvicorn
import yaml

from analytics.stats import format_class_name, sorted_class_stats
from models.config import Config
from models.errors import DetectionMonitorError
from models.state import ModelState
from ops.logging import setup_logging
from runtime.session import create_session_from_config
from web.app import create_app


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'detection', 'display', 'capture', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Camera
    camera = config.get('camera') or {}
    if 'device_id' not in camera:
        return False, "Missing camera.device_id"
    if not isinstance(camera['device_id'], (int, str)) or isinstance(camera['device_id'], bool):
        return False, "camera.device_id must be an integer (index) or string (URL/path)"
    if isinstance(camera['device_id'], int) and camera['device_id'] < 0:
        return False, "camera.device_id integer must be non-negative"

    resolution = camera.get('resolution')
    if not isinstance(resolution, list) or len(resolution) != 2:
        return False, "camera.resolution must be a list of [width, height]"
    if not all(isinstance(x, int) and x > 0 for x in resolution):
        return False, "camera.resolution values must be positive integers"

    if camera.get('facing_mode', 'user') not in ('user', 'environment'):
        return False, "camera.facing_mode must be one of: user, environment"

    # Detection
    detection = config.get('detection') or {}
    if detection.get('backend', 'yolo') != 'yolo':
        return False, "detection.backend must be: yolo"
    yolo_cfg = detection.get('yolo') or {}
    if not isinstance(yolo_cfg.get('model'), str) or not yolo_cfg.get('model'):
        return False, "detection.yolo.model is required"
    for key in ('conf_threshold', 'iou_threshold'):
        if key in yolo_cfg:
            value = yolo_cfg[key]
            if not isinstance(value, (int, float)) or not (0 <= value <= 1):
                return False, f"detection.yolo.{key} must be a number between 0 and 1"

    # Display
    display = config.get('display') or {}
    display_fps = display.get('display_fps', 60)
    if not isinstance(display_fps, (int, float)) or display_fps <= 0:
        return False, "display.display_fps must be a positive number"

    # Capture
    capture = config.get('capture') or {}
    capacity = capture.get('capacity', 10)
    if not isinstance(capacity, int) or capacity <= 0:
        return False, "capture.capacity must be a positive integer"
    stagger = capture.get('export_stagger', 0.1)
    if not isinstance(stagger, (int, float)) or stagger < 0:
        return False, "capture.export_stagger must be a non-negative number"

    # Logging
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


async def run_image(config: Config, image_path: str, output_dir: Optional[str]) -> int:
    """Detect once on a still image, export the annotated render, log stats."""
    session = create_session_from_config(config)
    try:
        state = await session.load_model()
        if state is not ModelState.READY:
            logging.error(f"Model unavailable: {session.error}")
            return 1

        data = Path(image_path).read_bytes()
        result = await session.load_image(data)
        image = session.capture()
        path = session.captures.export_one(image, output_dir or config.capture.export_dir)

        stats = session.stats
        logging.info(
            f"{image_path}: {stats.total} objects, {stats.unique_classes} classes, "
            f"avg confidence {stats.avg_confidence * 100:.0f}%"
        )
        for row in sorted_class_stats(stats):
            logging.info(
                f"  {format_class_name(row.class_name)}: {row.count} detected, "
                f"{row.max_confidence * 100:.0f}% max"
            )
        logging.info(f"Annotated image written to {path} ({len(result.detections)} boxes)")
        return 0
    finally:
        await session.close()


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Object Detection Monitor')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--image', type=str, default=None,
                        help='Run detection once on this image and exit')
    parser.add_argument('--output', type=str, default=None,
                        help='Output directory for --image mode')
    parser.add_argument('--host', type=str, default=None,
                        help='Web server host (overrides config)')
    parser.add_argument('--port', type=int, default=None,
                        help='Web server port (overrides config)')
    args = parser.parse_args()

    raw_config = load_config(args.config)

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    setup_logging(raw_config['log_path'], raw_config['log_level'])
    config = Config.from_dict(raw_config)

    if args.image:
        try:
            sys.exit(asyncio.run(run_image(config, args.image, args.output)))
        except (OSError, DetectionMonitorError) as e:
            logging.error(f"Image detection failed: {e}")
            sys.exit(1)

    host = args.host or config.web.host
    port = args.port or config.web.port
    logging.info(f"Starting Object Detection Monitor on {host}:{port}")

    session = create_session_from_config(config)
    try:
        uvicorn.run(
            create_app(session),
            host=host,
            port=port,
            log_level=config.log_level.lower(),
        )
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    finally:
        logging.info("Object Detection Monitor stopped")


if __name__ == "__main__":
    main()
