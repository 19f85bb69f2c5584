# healthscan/classify/__init__.py
"""
Classification modules.

- domains: Teeth / eye domains and fallback labels
- labels: Label store
- classifier: TFLite condition classifier
"""

from .domains import Domain, FALLBACK_LABELS, parse_mode
from .labels import LabelStore, load_labels, parse_labels, label_for
from .classifier import ConditionClassifier, ModelLoadError, argmax_confidence

__all__ = [
    'Domain',
    'FALLBACK_LABELS',
    'parse_mode',
    'LabelStore',
    'load_labels',
    'parse_labels',
    'label_for',
    'ConditionClassifier',
    'ModelLoadError',
    'argmax_confidence',
]
