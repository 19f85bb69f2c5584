# healthscan/classify/labels.py
"""
Label Store.

Loads human-readable class names for each model from a text resource (local
file or http(s) URL). One label per line, an optional leading numeric index
is stripped:

    0 Healthy
    1 Cavity

A missing, unreadable or empty resource never aborts startup; the domain's
built-in fallback list is used instead.
"""
import re
import logging
from pathlib import Path
from typing import Dict, Iterable, Sequence, Tuple

import requests

from .domains import Domain, FALLBACK_LABELS

logger = logging.getLogger(__name__)

_INDEX_PREFIX = re.compile(r'^\d+\s+')


class LabelFetchError(Exception):
    """The label resource could not be read."""


def parse_labels(text: str) -> Tuple[str, ...]:
    """Split label text into an ordered tuple of non-empty names."""
    labels = (_INDEX_PREFIX.sub('', line).strip() for line in text.split('\n'))
    return tuple(label for label in labels if label)


def read_label_resource(source: str, timeout: float = 5.0) -> str:
    """
    Read the raw text of a label resource.

    Raises:
        LabelFetchError: the file or URL could not be read
    """
    if source.startswith(('http://', 'https://')):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise LabelFetchError(f"{source}: {e}") from e
        return response.text

    try:
        return Path(source).read_text(encoding='utf-8-sig')
    except (OSError, UnicodeDecodeError) as e:
        raise LabelFetchError(f"{source}: {e}") from e


def load_labels(source: str, fallback: Sequence[str], timeout: float = 5.0) -> Tuple[str, ...]:
    """
    Load one label set, degrading to `fallback` on any failure.

    Returns:
        Tuple of class names
    """
    try:
        labels = parse_labels(read_label_resource(source, timeout=timeout))
    except LabelFetchError as e:
        logger.warning(f"Could not load labels ({e}). Using fallback labels.")
        return tuple(fallback)

    if not labels:
        logger.warning(f"Label file {source} is empty. Using fallback labels.")
        return tuple(fallback)

    logger.info(f"Loaded {len(labels)} labels from {source}")
    return labels


def label_for(labels: Sequence[str], index: int) -> str:
    """Label at `index`, or the synthetic "Class {index}" if out of range."""
    if 0 <= index < len(labels):
        return labels[index]
    return f"Class {index}"


class LabelStore:
    """Label sets per domain, read-only after startup."""

    def __init__(self, labels: Dict[Domain, Sequence[str]]):
        self._labels = {domain: tuple(names) for domain, names in labels.items()}

    @classmethod
    def load(cls, settings, domains: Iterable[Domain] = tuple(Domain)) -> 'LabelStore':
        """Load the label set of every domain from the configured resources."""
        sources = {
            Domain.TEETH: settings.TEETH_LABELS,
            Domain.EYE: settings.EYE_LABELS,
        }
        labels = {}
        for domain in domains:
            labels[domain] = load_labels(
                settings.resolve_path(sources[domain]),
                FALLBACK_LABELS[domain],
                timeout=settings.LABEL_FETCH_TIMEOUT
            )
        return cls(labels)

    def labels(self, domain: Domain) -> Tuple[str, ...]:
        return self._labels.get(domain, ())

    def label_for(self, domain: Domain, index: int) -> str:
        return label_for(self.labels(domain), index)
