# healthscan/processing/__init__.py
"""
Processing modules - Loop & Display.

- prediction_loop: Capture-infer-render state machine
- display: Result panels and OpenCV overlay
- loop_stats: Cycle timing
"""

from .display import DisplayHandler, PanelBoard, PanelState, Severity, classify_severity
from .loop_stats import LoopStats, LoopStatsSnapshot
from .prediction_loop import LoopState, Prediction, PredictionLoop, PredictionSession

__all__ = [
    'DisplayHandler',
    'PanelBoard',
    'PanelState',
    'Severity',
    'classify_severity',
    'LoopStats',
    'LoopStatsSnapshot',
    'LoopState',
    'Prediction',
    'PredictionLoop',
    'PredictionSession',
]
