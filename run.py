#!/usr/bin/env python3
"""
ardetect demo - simulated AR session, no camera or model needed.

The device pitch sweeps back and forth through the target angle while
frames arrive at camera rate; a MockDetector produces random boxes and a
synthetic depth map answers hit tests.

Usage:
    python run.py                      # defaults (-45° ± 20°, 3 s interval)
    python run.py --no-sensors         # device without orientation sensing
    python run.py --no-depth           # size-based distances only
    python run.py --yolo --image x.jpg # real YOLO on a still image
"""

import argparse
import logging
import math
import sys
import time

import numpy as np

from ardetect import DetectionSession, Frame, MockDetector, OrientationEstimator, PipelineConfig
from ardetect.core.depth import DepthMapLookup
from ardetect.core.orientation import STANDARD_GRAVITY
from ardetect.core.types import COCO_LABELS, Detection

FRAME_W, FRAME_H = 1280, 720
MAGNETIC_FIELD = (0.0, 20.0, -40.0)  # uT, device frame


def gravity_for_pitch(pitch_deg: float):
    """Accelerometer reading of a device held at the given pitch (no roll)."""
    p = math.radians(pitch_deg)
    return (0.0, -math.sin(p) * STANDARD_GRAVITY, math.cos(p) * STANDARD_GRAVITY)


def random_detections(rng: np.random.Generator, latency_s: float):
    """Random detection generator (behaves like a model, without one)."""
    def _detect(image):
        time.sleep(latency_s)
        if rng.random() < 0.3:
            return []
        left = rng.random() * FRAME_W * 0.3
        top = rng.random() * FRAME_H * 0.3
        return [Detection(
            label=str(COCO_LABELS[rng.integers(0, 10)]),
            confidence=0.7 + rng.random() * 0.25,
            bbox=(left, top, left + FRAME_W * (0.1 + rng.random() * 0.4), top + FRAME_H * 0.4),
        )]
    return _detect


def synthetic_depth(rng: np.random.Generator) -> np.ndarray:
    """Depth map in mm: a 2.5 m plane with random holes (no data)."""
    depth = np.full((FRAME_H // 4, FRAME_W // 4), 2500, dtype=np.uint16)
    holes = rng.random(depth.shape) < 0.5
    depth[holes] = 0
    return depth


def build_detector(args, config, rng):
    if args.yolo:
        from ardetect.core.yolo_detector import YoloDetector
        return YoloDetector(model_name=args.model, confidence_threshold=config.confidence_threshold,
                            max_results=config.max_results)
    return MockDetector(random_detections(rng, args.latency / 1000.0),
                        confidence_threshold=config.confidence_threshold, max_results=config.max_results)


def load_image(path):
    if path is None:
        return np.zeros((FRAME_H, FRAME_W, 3), dtype=np.uint8)
    import cv2
    image = cv2.imread(path)
    if image is None:
        raise SystemExit(f"[ERROR] Image not found: {path}")
    return image


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Tilt-gated AR detection demo")
    parser.add_argument("--target", type=float, default=None, help="Target pitch (deg)")
    parser.add_argument("--tolerance", type=float, default=None, help="Pitch tolerance (deg)")
    parser.add_argument("--interval", type=int, default=None, help="Min ms between detections")
    parser.add_argument("--duration", type=float, default=10.0, help="Seconds to simulate")
    parser.add_argument("--fps", type=float, default=15.0, help="Camera frame rate")
    parser.add_argument("--latency", type=float, default=400.0, help="Simulated inference ms")
    parser.add_argument("--confidence", type=float, default=None, help="Min detection confidence")
    parser.add_argument("--max-results", type=int, default=None, help="Max detections per frame")
    parser.add_argument("--no-sensors", action="store_true", help="Simulate missing magnetometer")
    parser.add_argument("--no-depth", action="store_true", help="Frames carry no depth lookup")
    parser.add_argument("--yolo", action="store_true", help="Use the ultralytics backend")
    parser.add_argument("--model", default="yolo11n")
    parser.add_argument("--image", default=None, help="Still image fed as every frame")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    )

    config = PipelineConfig.from_env()
    if args.target is not None:
        config.target_angle_deg = args.target
    if args.tolerance is not None:
        config.angle_tolerance_deg = args.tolerance
    if args.interval is not None:
        config.min_detection_interval_ms = args.interval
    if args.confidence is not None:
        config.confidence_threshold = args.confidence
    if args.max_results is not None:
        config.max_results = args.max_results
    config.validate()

    rng = np.random.default_rng(args.seed)
    estimator = OrientationEstimator(magnetometer_available=not args.no_sensors)
    session = DetectionSession(config, build_detector(args, config, rng), estimator)
    image = load_image(args.image)
    frame_h, frame_w = image.shape[:2]

    print()
    print("╔══════════════════════════════════════╗")
    print("║          ARDETECT DEMO               ║")
    print("║   Tilt-gated AR detection            ║")
    print("╚══════════════════════════════════════╝")
    print()
    print(f"  Target: {config.target_angle_deg:.0f}° ± {config.angle_tolerance_deg:.0f}°")
    print(f"  Interval: {config.min_detection_interval_ms} ms")
    print(f"  Orientation: {'unavailable' if args.no_sensors else 'simulated'}")
    print(f"  Depth: {'off' if args.no_depth else 'synthetic map'}")
    print()

    start = time.monotonic()
    session.start(0)
    frame_interval = 1.0 / args.fps

    try:
        while True:
            elapsed = time.monotonic() - start
            if elapsed >= args.duration:
                break
            now_ms = int(elapsed * 1000)

            # Pitch sweeps -90° .. 0° with a 6 s period
            pitch = -45.0 + 45.0 * math.sin(2 * math.pi * elapsed / 6.0)
            session.on_accelerometer(gravity_for_pitch(pitch), now_ms)
            session.on_magnetometer(MAGNETIC_FIELD, now_ms)

            lookup = None
            if not args.no_depth:
                lookup = DepthMapLookup(synthetic_depth(rng), frame_w, frame_h)
            frame = Frame(image=image, width=frame_w, height=frame_h, timestamp_ms=now_ms, depth_lookup=lookup)

            if session.on_frame(frame):
                print(f"  [{now_ms:6d} ms] pitch={pitch:6.1f}°  → detection dispatched")

            result = session.poll()
            if result is not None:
                _print_result(now_ms, result)

            time.sleep(frame_interval)

        if session.is_detecting:
            result = session.poll(timeout=5.0)
            if result is not None:
                _print_result(int((time.monotonic() - start) * 1000), result)
    except KeyboardInterrupt:
        print("\nInterrupted")
    finally:
        session.close()

    print()
    print(f"  {session.scheduler.state.fired} detections dispatched, "
          f"{session.scheduler.state.completed} completed")
    print(f"  Status: {session.status_text()}")
    return 0


def _print_result(now_ms: int, detections):
    if not detections:
        print(f"  [{now_ms:6d} ms] no objects in the zone")
        return
    for det in detections:
        print(f"  [{now_ms:6d} ms] {det.label.upper():<14} {det.distance_m:5.1f} m  "
              f"{int(det.confidence * 100)}%")


if __name__ == '__main__':
    sys.exit(main())
