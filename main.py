#!/usr/bin/env python3
"""
PPG Heart Rate – headless host demo.

Usage
-----
    python main.py [OPTIONS]

Options
-------
    --resolution WxH     Camera resolution (default: 640x480)
    --fps INT            Target frame rate  (default: 30)
    --camera-index INT   OpenCV camera index (default: 0)
    --duration FLOAT     Stop after this many seconds (default: run until Ctrl-C)
    --interval FLOAT     Seconds between printed estimates (default: 1)
    --json               Print each estimate as a JSON object
    --verbose            Debug logging

Cover the camera (and flash, if any) with a fingertip and hold still.
Lifting the finger restarts the measurement.  Readings are informational
only and are not a medical diagnosis.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time

from ppg_heart_rate.camera import FingerCamera
from ppg_heart_rate.exceptions import InvalidFrame
from ppg_heart_rate.finger_detector import FingerDetector
from ppg_heart_rate.models import HeartRateResult
from ppg_heart_rate.signal_processor import PPGProcessor

logger = logging.getLogger("ppg_heart_rate")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Camera PPG heart-rate monitor (finger on lens)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--resolution", default="640x480",
                        help="Camera resolution, e.g. 640x480")
    parser.add_argument("--fps", type=int, default=30,
                        help="Target capture frame rate")
    parser.add_argument("--camera-index", type=int, default=0,
                        help="OpenCV VideoCapture index")
    parser.add_argument("--duration", type=float, default=None,
                        help="Stop after this many seconds")
    parser.add_argument("--interval", type=float, default=1.0,
                        help="Seconds between printed estimates")
    parser.add_argument("--json", action="store_true",
                        help="Print estimates as JSON")
    parser.add_argument("--verbose", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


def format_result(result: HeartRateResult, as_json: bool = False) -> str:
    if as_json:
        return json.dumps(result.to_dict())
    ts = time.strftime("%H:%M:%S")
    if result.heart_rate is None:
        hint = result.recommendations[0] if result.recommendations else "Waiting for signal…"
        return f"[{ts}] --- BPM  quality={result.quality.value}  {hint}"
    return (
        f"[{ts}] {result.heart_rate} BPM  conf={result.confidence:.2f}  "
        f"quality={result.quality.value}  strength={result.signal_strength:.2f}  "
        f"noise={result.noise_level:.2f}"
    )


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s – %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        res_w, res_h = (int(v) for v in args.resolution.lower().split("x"))
    except ValueError:
        logger.error("Invalid --resolution format.  Use WxH, e.g. 640x480.")
        return 1

    camera    = FingerCamera(
        resolution=(res_w, res_h),
        fps=args.fps,
        camera_index=args.camera_index,
    )
    processor = PPGProcessor()
    detector  = FingerDetector()

    logger.info("Starting heartbeat monitor.  Press Ctrl-C to quit.")

    started = time.monotonic()
    last_report = started
    finger_was_present = False

    try:
        with camera:
            for frame in camera.frames():
                now = time.monotonic()
                if args.duration is not None and now - started >= args.duration:
                    break

                try:
                    finger_present = detector.is_finger(frame)
                    if finger_present:
                        processor.push_frame(frame)
                except InvalidFrame as exc:
                    logger.warning("Skipping frame: %s", exc)
                    continue

                if finger_was_present and not finger_present:
                    processor.clear()
                    logger.info("Finger removed – measurement restarted.")
                finger_was_present = finger_present

                if now - last_report >= args.interval:
                    last_report = now
                    print(format_result(processor.estimate(), as_json=args.json), flush=True)

    except KeyboardInterrupt:
        logger.info("Interrupted.")
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1

    final = processor.estimate()
    print(format_result(final, as_json=args.json))
    return 0


def main() -> None:
    sys.exit(run(parse_args()))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
