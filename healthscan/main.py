# healthscan/main.py
"""
HealthScan - Main Entry Point.

Wires the modules together:
- core/: settings, camera, TFLite helper, model factory
- classify/: domains, labels, classifier
- processing/: prediction loop, display, loop stats

Usage:
    python -m healthscan.main                   # both panels
    python -m healthscan.main --mode teeth      # dental panel only (t/e/b to switch)
    python -m healthscan.main --threshold 0.6   # custom confidence threshold
    python -m healthscan.main --headless        # no window, log predictions
"""
import os
import sys
import time
import logging
import argparse

# === SETUP DISPLAY BEFORE IMPORTING CV2 ===
if os.environ.get("DISPLAY", "") == "":
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import cv2
import numpy as np

from .core import settings, create_camera
from .core.model_factory import create_classifiers
from .classify import LabelStore, ModelLoadError
from .processing import DisplayHandler, PanelBoard, PredictionLoop, PredictionSession
from .processing.display import key_to_mode

logger = logging.getLogger(__name__)

WINDOW_NAME = "HealthScan"


def setup_logging(verbose: bool = False):
    """Console logging everywhere, plus a log file on the Pi."""
    handlers = [logging.StreamHandler()]
    if settings.IS_PI:
        handlers.append(logging.FileHandler('healthscan.log', encoding='utf-8'))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='HealthScan - live dental and eye condition screening',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m healthscan.main                    # Run with defaults
  python -m healthscan.main --mode eye         # Eye panel only
  python -m healthscan.main -r 1280x720 --no-mirror
        """
    )

    # Models
    parser.add_argument(
        '--threshold', '-t',
        type=float,
        metavar='VALUE',
        help=f'Confidence threshold (default: {settings.PREDICTION_THRESHOLD})'
    )
    parser.add_argument('--teeth-model', metavar='PATH', help='Dental .tflite model')
    parser.add_argument('--eye-model', metavar='PATH', help='Eye .tflite model')
    parser.add_argument('--teeth-labels', metavar='PATH_OR_URL', help='Dental label file')
    parser.add_argument('--eye-labels', metavar='PATH_OR_URL', help='Eye label file')

    # Display mode
    parser.add_argument(
        '--mode', '-m',
        choices=['both', 'teeth', 'eye'],
        help=f'Panels to show (default: {settings.DISPLAY_MODE})'
    )
    parser.add_argument(
        '--headless',
        action='store_true',
        help='Run without a window'
    )
    parser.add_argument(
        '--gui',
        action='store_true',
        help='Force a window even without $DISPLAY'
    )

    # Camera
    parser.add_argument(
        '--camera', '-c',
        type=int,
        metavar='ID',
        help=f'Camera device ID (default: {settings.CAMERA_DEVICE})'
    )
    parser.add_argument(
        '--resolution', '-r',
        type=str,
        metavar='WxH',
        help=f'Camera resolution (default: {settings.CAMERA_WIDTH}x{settings.CAMERA_HEIGHT})'
    )
    parser.add_argument(
        '--no-mirror',
        action='store_true',
        help='Do not mirror the camera image'
    )

    # Debug
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose logging'
    )

    return parser.parse_args(argv)


def apply_arguments(args, target=None):
    """
    Apply command line arguments to settings.

    Returns:
        List of human-readable changes
    """
    target = target or settings
    changes = []

    if args.threshold is not None:
        target.PREDICTION_THRESHOLD = args.threshold
        changes.append(f"Threshold: {args.threshold}")

    for attr, value in (
        ('TEETH_MODEL', args.teeth_model),
        ('EYE_MODEL', args.eye_model),
        ('TEETH_LABELS', args.teeth_labels),
        ('EYE_LABELS', args.eye_labels),
    ):
        if value:
            setattr(target, attr, value)
            changes.append(f"{attr}: {value}")

    if args.mode:
        target.DISPLAY_MODE = args.mode
        changes.append(f"Mode: {args.mode}")

    if args.headless:
        target.HEADLESS_MODE = True
        changes.append("Display: headless")
    if args.gui:
        target.FORCE_GUI_MODE = True
        target.HEADLESS_MODE = False
        changes.append("Display: GUI (forced)")

    if args.camera is not None:
        target.CAMERA_DEVICE = args.camera
        changes.append(f"Camera: {args.camera}")
    if args.resolution:
        try:
            w, h = map(int, args.resolution.lower().split('x'))
            target.CAMERA_WIDTH = w
            target.CAMERA_HEIGHT = h
            changes.append(f"Resolution: {w}x{h}")
        except ValueError:
            logger.warning(f"Invalid resolution format: {args.resolution} (use WxH, e.g. 640x480)")
    if args.no_mirror:
        target.MIRROR_CAMERA = False
        changes.append("Mirror: off")

    return changes


def print_startup_info(labels: LabelStore, classifiers):
    """Print the startup banner."""
    print("\n" + "=" * 50)
    print("🦷👁️  HEALTHSCAN")
    print("=" * 50)
    print(f"📍 Mode: {settings.DISPLAY_MODE} ({'headless' if settings.HEADLESS_MODE else 'GUI'})")
    print(f"🎯 Threshold: > {settings.PREDICTION_THRESHOLD:.2f}")
    for domain, classifier in classifiers.items():
        names = labels.labels(domain)
        print(f"🧠 {domain.title}: {os.path.basename(classifier.model_path)} "
              f"({classifier.num_classes} outputs, {len(names)} labels)")
    print("-" * 50)
    if not settings.HEADLESS_MODE:
        print("⌨️  t=teeth | e=eye | b=both | q=quit")
    else:
        print("⌨️  Ctrl+C to quit")
    print("=" * 50 + "\n")


def show_message(display: DisplayHandler, text: str, error: bool = False, wait: bool = False):
    """Full-window message in GUI mode (loading overlay / fatal error)."""
    if not display.enabled:
        return
    canvas = np.full((settings.CAMERA_HEIGHT, settings.CAMERA_WIDTH, 3), 30, dtype=np.uint8)
    display.draw_message(canvas, text, error=error)
    cv2.imshow(WINDOW_NAME, canvas)
    cv2.waitKey(0 if wait else 1)


def main(argv=None) -> int:
    """Main entry point."""

    # === 0. ARGUMENTS & LOGGING ===
    args = parse_arguments(argv)
    setup_logging(args.verbose)
    arg_changes = apply_arguments(args)

    if arg_changes:
        print("🔧 Command-line overrides:")
        for change in arg_changes:
            print(f"   • {change}")
        print()

    display = DisplayHandler(overlay_enabled=not settings.HEADLESS_MODE)

    # === 1. CAMERA ===
    camera = create_camera(settings)
    if not camera.open():
        print("❌ Camera access is required. Please allow camera permissions.")
        return 1

    # === 2. LABELS (never fatal) ===
    labels = LabelStore.load(settings)

    # === 3. MODELS ===
    show_message(display, "Loading TFLite Models...")
    try:
        classifiers = create_classifiers(settings)
    except ModelLoadError as e:
        logger.error(f"Error loading the models: {e}")
        names = " or ".join(os.path.basename(p) for p in e.model_paths)
        show_message(display, f"Error: {names} not found.", error=True, wait=True)
        camera.release()
        display.destroy_windows()
        return 1

    # === 4. LOOP ===
    board = PanelBoard(threshold=settings.PREDICTION_THRESHOLD, mode=settings.DISPLAY_MODE)
    session = PredictionSession(
        frame_source=camera,
        labels=labels,
        renderer=board,
        classifiers=classifiers
    )
    loop = PredictionLoop(session)

    print_startup_info(labels, classifiers)

    last_status_time = time.time()

    def refresh() -> bool:
        nonlocal last_status_time

        frame = camera.read()

        if settings.HEADLESS_MODE:
            now = time.time()
            if now - last_status_time > settings.STATUS_LOG_INTERVAL:
                stats = loop.stats.snapshot()
                summary = ", ".join(
                    f"{p.domain.value}={p.label} ({p.confidence:.0%})" for p in loop.last_predictions
                ) or "no prediction yet"
                logger.info(f"♻️ Running... {summary}, avg {stats.avg_cycle_ms:.0f}ms")
                last_status_time = now
            return True

        if frame is None:
            return True

        canvas = frame.copy()
        display.draw_panels(canvas, board)
        display.draw_stats(canvas, loop.stats.snapshot().as_dict(), board.mode)

        key = display.show(WINDOW_NAME, canvas)
        if key == ord('q'):
            return False
        mode = key_to_mode(key)
        if mode is not None and mode != board.mode:
            board.set_mode(mode)
            logger.info(f"Mode: {mode}")
        return True

    try:
        loop.run_forever(refresh)
    except KeyboardInterrupt:
        print("\n🛑 Stopped (Ctrl+C)")
    finally:
        camera.release()
        if not settings.HEADLESS_MODE:
            display.destroy_windows()
        print("👋 Bye!")

    return 0


if __name__ == "__main__":
    sys.exit(main())
