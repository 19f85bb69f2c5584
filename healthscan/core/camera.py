# healthscan/core/camera.py
"""
Camera / frame source module.

Opens the webcam once, waits for the stream to deliver a first frame, and
hands out the latest frame either raw (for display) or preprocessed into a
normalized model batch.

Usage:
    from healthscan.core.camera import CameraManager

    with CameraManager() as camera:
        batch = camera.current_frame()   # (1, 224, 224, 3) float32 in [0, 1]
"""
import cv2
import time
import logging
import numpy as np
from typing import Optional, Tuple
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class CameraConfig:
    """Camera configuration."""
    width: int = 640
    height: int = 480
    buffer_size: int = 1
    input_size: int = 224          # square model input
    mirror: bool = True            # flip the displayed frame only (user-facing camera)
    ready_timeout: float = 5.0     # seconds to wait for the first frame


def preprocess_frame(frame: np.ndarray, size: int = 224) -> np.ndarray:
    """
    Turn a BGR camera frame into a model batch.

    Pipeline:
    1. Bilinear resize to size x size
    2. BGR -> RGB
    3. Scale to [0, 1] float32
    4. Add the batch dimension

    Returns:
        Array of shape (1, size, size, 3)
    """
    resized = cv2.resize(frame, (size, size), interpolation=cv2.INTER_LINEAR)
    rgb = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
    normalized = rgb.astype(np.float32) / 255.0
    return np.expand_dims(normalized, axis=0)


class CameraManager:
    """
    Frame source backed by cv2.VideoCapture.

    open() is a one-time handshake; there is no retry. A failed open is fatal
    to startup and the caller reports it.
    """

    def __init__(
        self,
        device_id: int = 0,
        config: Optional[CameraConfig] = None,
        capture_factory=cv2.VideoCapture
    ):
        """
        Args:
            device_id: Camera ID or video file path
            config: CameraConfig object
            capture_factory: Callable creating the capture (tests pass a fake)
        """
        self.device_id = device_id
        self.config = config or CameraConfig()
        self._capture_factory = capture_factory

        self._cap = None
        self._is_open = False
        self._last_frame: Optional[np.ndarray] = None

    def open(self) -> bool:
        """
        Open the camera and wait until it delivers a frame.

        Returns:
            True if the camera is ready
        """
        try:
            self._cap = self._capture_factory(self.device_id)
            if not self._cap.isOpened():
                logger.error(f"❌ Camera {self.device_id} is unavailable or access was denied")
                self.release()
                return False

            self._configure_camera()
            if not self._wait_until_ready():
                logger.error("❌ Camera opened but delivered no frames")
                self.release()
                return False

        except cv2.error as e:
            logger.error(f"❌ Camera error: {e}")
            self.release()
            return False

        self._is_open = True
        actual_w, actual_h = self.get_resolution()
        logger.info(f"📹 Camera opened: {actual_w}x{actual_h}")
        return True

    def _configure_camera(self):
        """Apply resolution and buffer settings."""
        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)

    def _wait_until_ready(self) -> bool:
        """Block until the stream produces its first frame."""
        deadline = time.monotonic() + self.config.ready_timeout
        while True:
            ret, frame = self._cap.read()
            if ret and frame is not None:
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(0.05)

    def read(self) -> Optional[np.ndarray]:
        """
        Read the latest frame from the camera.

        Returns:
            BGR frame (mirrored if configured) or None on error
        """
        if not self._is_open or self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            logger.warning("Could not read a frame")
            return None

        # Models see the raw frame; the caller draws on its own (mirrored) copy
        self._last_frame = frame
        if self.config.mirror:
            return cv2.flip(frame, 1)
        return frame.copy()

    @property
    def last_frame(self) -> Optional[np.ndarray]:
        """Most recent raw (unmirrored) frame."""
        return self._last_frame

    def current_frame(self) -> Optional[np.ndarray]:
        """Most recent raw frame as a normalized (1, N, N, 3) model batch."""
        if self._last_frame is None and self.read() is None:
            return None
        return preprocess_frame(self._last_frame, self.config.input_size)

    def release(self):
        """Release the camera."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("📹 Camera released")
        self._is_open = False

    def is_opened(self) -> bool:
        return self._is_open and self._cap is not None and self._cap.isOpened()

    def get_resolution(self) -> Tuple[int, int]:
        """Actual capture resolution."""
        if self._cap is None:
            return (0, 0)
        return (
            int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        )

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False


def create_camera(settings) -> CameraManager:
    """Build a CameraManager from Settings."""
    config = CameraConfig(
        width=settings.CAMERA_WIDTH,
        height=settings.CAMERA_HEIGHT,
        input_size=settings.MODEL_INPUT_SIZE,
        mirror=settings.MIRROR_CAMERA
    )
    return CameraManager(device_id=settings.CAMERA_DEVICE, config=config)
