# healthscan/core/settings.py
"""
Configuration for HealthScan.

Defaults live in the Settings dataclass and can be overridden by
`config/config.json` (same key names). Command-line arguments are applied
on top of that by `healthscan.main`.
"""
import os
import json
import logging
import platform
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


# === PLATFORM DETECTION ===
IS_WINDOWS = platform.system() == "Windows"
IS_PI = platform.system() == "Linux" and os.path.exists("/proc/device-tree/model")
HAS_DISPLAY = IS_WINDOWS or os.environ.get("DISPLAY", "") != ""

# === PATHS ===
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
CONFIG_PATH = os.path.join(BASE_DIR, 'config', 'config.json')

DISPLAY_MODES = ('both', 'teeth', 'eye')


def _load_json_config(path: str) -> dict:
    """Load a JSON config file, returning {} when missing or invalid."""
    if not os.path.exists(path):
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: top level must be an object")
        return {}
    return data


@dataclass
class Settings:
    """Runtime settings for the screening loop."""

    # === PLATFORM (read-only) ===
    IS_WINDOWS: bool = field(default_factory=lambda: IS_WINDOWS)
    IS_PI: bool = field(default_factory=lambda: IS_PI)
    HAS_DISPLAY: bool = field(default_factory=lambda: HAS_DISPLAY)
    BASE_DIR: str = field(default_factory=lambda: BASE_DIR)

    # === CAMERA ===
    CAMERA_DEVICE: int = 0
    CAMERA_WIDTH: int = 640
    CAMERA_HEIGHT: int = 480
    MIRROR_CAMERA: bool = True           # user-facing camera

    # === MODELS ===
    MODEL_INPUT_SIZE: int = 224
    PREDICTION_THRESHOLD: float = 0.50
    TEETH_MODEL: str = "models/model_unquant.tflite"
    EYE_MODEL: str = "models/Eye.tflite"
    TEETH_LABELS: str = "models/labels.txt"
    EYE_LABELS: str = "models/label.txt"
    LABEL_FETCH_TIMEOUT: float = 5.0
    TFLITE_NUM_THREADS: int = 4

    # === DISPLAY ===
    DISPLAY_MODE: str = "both"           # both | teeth | eye
    FORCE_GUI_MODE: bool = False
    HEADLESS_MODE: bool = False
    STATUS_LOG_INTERVAL: float = 30.0

    config_path: str = field(default=CONFIG_PATH, repr=False)

    def __post_init__(self):
        self._load_from_json()
        self._compute_defaults()

    def _load_from_json(self):
        """Apply overrides from config.json, ignoring unknown keys and nulls."""
        config = _load_json_config(self.config_path)
        for key, value in config.items():
            if not key.isupper() or not hasattr(self, key):
                logger.debug(f"Unknown config key: {key}")
                continue
            if value is not None:
                setattr(self, key, value)

    def _compute_defaults(self):
        """Platform-dependent values."""
        if self.IS_PI:
            self.TFLITE_NUM_THREADS = min(self.TFLITE_NUM_THREADS, 2)

        if self.DISPLAY_MODE not in DISPLAY_MODES:
            logger.warning(f"Unknown DISPLAY_MODE {self.DISPLAY_MODE!r}, using 'both'")
            self.DISPLAY_MODE = "both"

        self.HEADLESS_MODE = self.HEADLESS_MODE or (
            not self.IS_WINDOWS and not self.FORCE_GUI_MODE and not self.HAS_DISPLAY
        )

    def resolve_path(self, path: str) -> str:
        """Resolve a relative resource path against the project root. URLs pass through."""
        if path.startswith(('http://', 'https://')) or os.path.isabs(path):
            return path
        return os.path.join(self.BASE_DIR, path)


# === SINGLETON ===
settings = Settings()
