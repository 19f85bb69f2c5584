# healthscan/processing/prediction_loop.py
"""
Prediction loop.

One cycle = grab the current frame, run the model of every active domain,
reduce each probability vector to (index, confidence), resolve the label and
hand the result to the renderer.

At most one cycle runs at a time. A tick that arrives while a cycle is still
running is dropped, not queued.

Usage:
    session = PredictionSession(frame_source=camera, labels=label_store,
                                renderer=board, classifiers=classifiers)
    loop = PredictionLoop(session)
    loop.run_forever(refresh)      # refresh() -> False stops the loop
"""
import time
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..classify.classifier import argmax_confidence
from ..classify.domains import Domain
from .loop_stats import LoopStats

logger = logging.getLogger(__name__)


class LoopState(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class Prediction:
    """Top class of one model for one frame."""
    domain: Domain
    index: int
    confidence: float
    label: str


@dataclass
class PredictionSession:
    """
    Everything a cycle reads. Read-only once the models are attached.

    frame_source: object with current_frame() -> batch or None
    labels: LabelStore
    renderer: object with render(label, confidence, target)
    classifiers: Domain -> object with predict(batch); empty until models are ready
    active_domains: selector for the domains to run this cycle
                    (defaults to renderer.active_domains)
    """
    frame_source: object
    labels: object
    renderer: object
    classifiers: Dict[Domain, object] = field(default_factory=dict)
    active_domains: Optional[Callable[[], Tuple[Domain, ...]]] = None

    def __post_init__(self):
        if self.active_domains is None:
            self.active_domains = self.renderer.active_domains

    @property
    def ready(self) -> bool:
        return bool(self.classifiers)

    def attach_classifiers(self, classifiers: Dict[Domain, object]):
        self.classifiers = dict(classifiers)


class PredictionLoop:
    """
    Idle/Running state machine driven by display refresh ticks.
    """

    def __init__(self, session: PredictionSession, stats: Optional[LoopStats] = None):
        self.session = session
        self.stats = stats or LoopStats()
        # Non-blocking acquire: a busy guard drops the tick
        self._in_flight = threading.Lock()
        self.last_predictions: List[Prediction] = []

    @property
    def state(self) -> LoopState:
        return LoopState.RUNNING if self._in_flight.locked() else LoopState.IDLE

    def tick(self) -> Optional[List[Prediction]]:
        """
        Run one cycle if idle.

        Returns:
            Predictions of this cycle ([] when not ready / no frame),
            None if the tick was dropped
        """
        if not self._in_flight.acquire(blocking=False):
            self.stats.record_drop()
            logger.debug("Tick dropped: cycle still running")
            return None

        start = time.perf_counter()
        try:
            predictions = self._run_cycle()
        except Exception:
            logger.exception("Prediction cycle failed")
            predictions = []
        finally:
            self._in_flight.release()

        self.stats.record_cycle(time.perf_counter() - start)
        if predictions:
            self.last_predictions = predictions
        return predictions

    def _run_cycle(self) -> List[Prediction]:
        session = self.session
        if not session.ready:
            return []

        batch = session.frame_source.current_frame()
        if batch is None:
            return []

        predictions = []
        for domain in session.active_domains():
            classifier = session.classifiers.get(domain)
            if classifier is None:
                continue
            index, confidence = argmax_confidence(classifier.predict(batch))
            label = session.labels.label_for(domain, index)
            predictions.append(Prediction(domain, index, confidence, label))

        for prediction in predictions:
            session.renderer.render(prediction.label, prediction.confidence, prediction.domain)

        return predictions

    def run_forever(self, refresh: Callable[[], bool]):
        """
        Tick once per display refresh until refresh() returns False.

        refresh() is the host's per-frame hook (read camera, draw, poll keys).
        """
        while True:
            self.tick()
            if not refresh():
                break
