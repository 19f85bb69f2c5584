# healthscan package
"""
HealthScan - live dental & eye condition screening (TFLite)

Structure:
    healthscan/
    ├── core/                     # Core infrastructure
    │   ├── settings.py           # Configuration
    │   ├── camera.py             # Camera / frame source
    │   ├── tflite_helper.py      # TFLite interpreter helper
    │   └── model_factory.py      # Loads both classifiers
    ├── classify/                 # Classification
    │   ├── domains.py            # Teeth / eye domains
    │   ├── labels.py             # Label store
    │   └── classifier.py         # TFLite classifier + argmax
    ├── processing/               # Processing modules
    │   ├── prediction_loop.py    # Capture-infer-render loop
    │   ├── display.py            # Panels / overlay
    │   └── loop_stats.py         # Cycle timing
    └── main.py                   # Main application

Usage:
    from healthscan import settings, create_classifiers, LabelStore

    classifiers = create_classifiers(settings)
    labels = LabelStore.load(settings)
"""

from .core.settings import settings
from .core.model_factory import create_classifiers
from .classify import Domain, LabelStore, ConditionClassifier, argmax_confidence
from .processing import PanelBoard, PredictionLoop, PredictionSession

__all__ = [
    'settings',
    'create_classifiers',
    'Domain',
    'LabelStore',
    'ConditionClassifier',
    'argmax_confidence',
    'PanelBoard',
    'PredictionLoop',
    'PredictionSession',
]
