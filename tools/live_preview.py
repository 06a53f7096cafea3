#!/usr/bin/env python3
"""
Live preview of the detection loop in an OpenCV window.
This utility helps verify camera, model and rendering together without the web UI.

Usage:
    python tools/live_preview.py --config config/config.yaml
    python tools/live_preview.py --device 1 --model yolov8s.pt

Keys:
    q - quit
    c - capture the current render into output/captures
"""

import argparse
import asyncio
import os
import sys

import cv2

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from analytics.stats import format_class_name, sorted_class_stats  # noqa: E402
from main import load_config  # noqa: E402
from models.config import Config  # noqa: E402
from models.state import ModelState, RunState  # noqa: E402
from runtime.session import create_session_from_config  # noqa: E402


async def preview(config: Config) -> int:
    session = create_session_from_config(config)
    print(f"Loading model {config.detection.yolo.model}...")
    if await session.load_model() is not ModelState.READY:
        print(f"ERROR: {session.error}")
        return 1

    await session.start()
    if session.run_state is not RunState.ACTIVE:
        print(f"ERROR: {session.error}")
        return 1

    print("Running. Press 'q' to quit, 'c' to capture.")
    last_fps = None
    try:
        while session.run_state is RunState.ACTIVE:
            if session.surface.has_content:
                cv2.imshow("Detection Preview", session.surface.snapshot())
            key = cv2.waitKey(1) & 0xFF
            if key == ord('q'):
                break
            if key == ord('c'):
                image = session.capture()
                path = session.captures.export_one(image, config.capture.export_dir)
                print(f"Captured {path}")

            if session.fps != last_fps:
                last_fps = session.fps
                rows = ", ".join(
                    f"{format_class_name(r.class_name)} x{r.count}"
                    for r in sorted_class_stats(session.stats)
                )
                print(f"FPS: {session.fps}  objects: {session.stats.total}  [{rows}]")

            # Yield to the scheduler between display refreshes.
            await asyncio.sleep(config.display.tick_interval)
    finally:
        await session.close()
        cv2.destroyAllWindows()

    if session.error:
        print(f"ERROR: {session.error}")
        return 1
    return 0


def main():
    """Main function for the live preview."""
    parser = argparse.ArgumentParser(description='Preview the detection loop')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--device', type=int, default=None,
                        help='Camera device ID (overrides config)')
    parser.add_argument('--model', type=str, default=None,
                        help='YOLO weights (overrides config)')
    args = parser.parse_args()

    config = Config.from_dict(load_config(args.config))
    if args.device is not None:
        config.camera.device_id = args.device
    if args.model:
        config.detection.yolo.model = args.model

    return asyncio.run(preview(config))


if __name__ == "__main__":
    sys.exit(main())
