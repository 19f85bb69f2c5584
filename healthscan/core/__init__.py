# healthscan/core/__init__.py
"""
Core modules - Infrastructure & Configuration.

- settings: Unified configuration
- camera: Camera / frame source
- tflite_helper: TFLite interpreter helper
- model_factory: Loads the classifiers
"""

from .settings import settings, Settings
from .camera import CameraManager, CameraConfig, create_camera, preprocess_frame
from .tflite_helper import get_interpreter

__all__ = [
    'settings',
    'Settings',
    'CameraManager',
    'CameraConfig',
    'create_camera',
    'preprocess_frame',
    'get_interpreter',
]
