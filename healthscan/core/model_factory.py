# healthscan/core/model_factory.py
"""
Factory for the two condition classifiers.

Usage:
    from healthscan.core.model_factory import create_classifiers

    classifiers = create_classifiers(settings)   # {Domain.TEETH: ..., Domain.EYE: ...}
"""
import logging
from typing import Dict, Iterable, Optional

from ..classify.classifier import ConditionClassifier, ModelLoadError
from ..classify.domains import Domain

logger = logging.getLogger(__name__)


def model_paths(settings) -> Dict[Domain, str]:
    """Resolved model path per domain."""
    return {
        Domain.TEETH: settings.resolve_path(settings.TEETH_MODEL),
        Domain.EYE: settings.resolve_path(settings.EYE_MODEL),
    }


def create_classifier(domain: Domain, model_path: str, num_threads=None,
                      input_size: Optional[int] = None) -> ConditionClassifier:
    """
    Load one classifier.

    Args:
        input_size: Frame size the camera feeds; the model must accept it

    Raises:
        ModelLoadError: model missing, unreadable, no TFLite runtime,
            or expecting a different input size
    """
    logger.info(f"[{domain.value}] Model: {model_path}")
    try:
        classifier = ConditionClassifier(domain, model_path, num_threads=num_threads)
    except (ImportError, ValueError, RuntimeError, OSError) as e:
        raise ModelLoadError(f"{domain.value} model {model_path}: {e}", (model_path,)) from e

    if input_size is not None and classifier.input_size != input_size:
        raise ModelLoadError(
            f"{domain.value} model {model_path}: expects {classifier.input_size}x{classifier.input_size} "
            f"input, camera frames are {input_size}x{input_size}",
            (model_path,)
        )
    return classifier


def create_classifiers(settings, domains: Iterable[Domain] = tuple(Domain)) -> Dict[Domain, ConditionClassifier]:
    """
    Load every classifier. All of them must succeed.

    Raises:
        ModelLoadError: listing every model path that is needed
    """
    paths = model_paths(settings)
    domains = tuple(domains)
    classifiers = {}
    try:
        for domain in domains:
            classifiers[domain] = create_classifier(
                domain, paths[domain],
                num_threads=settings.TFLITE_NUM_THREADS,
                input_size=settings.MODEL_INPUT_SIZE
            )
    except ModelLoadError as e:
        raise ModelLoadError(str(e), tuple(paths[d] for d in domains)) from e
    return classifiers
