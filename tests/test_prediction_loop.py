import numpy as np

from healthscan.classify.domains import Domain
from healthscan.classify.labels import LabelStore
from healthscan.processing.display import PanelBoard, SCANNING_TEXT
from healthscan.processing.prediction_loop import (
    LoopState,
    Prediction,
    PredictionLoop,
    PredictionSession,
)


class StubClassifier:
    def __init__(self, probabilities):
        self.probabilities = np.asarray(probabilities, dtype=np.float32)
        self.calls = 0

    def predict(self, batch):
        self.calls += 1
        return self.probabilities


class RecordingRenderer(PanelBoard):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.rendered = []

    def render(self, label, confidence, target):
        self.rendered.append((label, round(confidence, 3), target))
        return super().render(label, confidence, target)


def make_session(frame_source, mode="both", classifiers=None):
    labels = LabelStore({
        Domain.TEETH: ("Healthy", "Cavity", "Gingivitis", "Periodontitis", "Calculus"),
        Domain.EYE: ("Cataract", "diabetic_retinopathy", "glaucoma", "Normal"),
    })
    if classifiers is None:
        classifiers = {
            Domain.TEETH: StubClassifier([0.1, 0.9, 0.0, 0.0, 0.0]),
            Domain.EYE: StubClassifier([0.0, 0.0, 0.3, 0.7]),
        }
    renderer = RecordingRenderer(mode=mode)
    return PredictionSession(
        frame_source=frame_source,
        labels=labels,
        renderer=renderer,
        classifiers=classifiers,
    )


def test_cycle_runs_both_models_and_renders(frame_source):
    session = make_session(frame_source)
    loop = PredictionLoop(session)

    predictions = loop.tick()

    assert predictions == [
        Prediction(Domain.TEETH, 1, predictions[0].confidence, "Cavity"),
        Prediction(Domain.EYE, 3, predictions[1].confidence, "Normal"),
    ]
    assert session.renderer.rendered == [
        ("Cavity", 0.9, Domain.TEETH),
        ("Normal", 0.7, Domain.EYE),
    ]
    assert session.renderer.panel(Domain.TEETH).bar_percent == 90
    assert loop.state is LoopState.IDLE
    assert frame_source.calls == 1


def test_single_mode_runs_only_active_model(frame_source):
    session = make_session(frame_source, mode="eye")
    loop = PredictionLoop(session)

    predictions = loop.tick()

    assert [p.domain for p in predictions] == [Domain.EYE]
    assert session.classifiers[Domain.TEETH].calls == 0
    assert session.classifiers[Domain.EYE].calls == 1


def test_mode_switch_applies_on_next_cycle(frame_source):
    session = make_session(frame_source, mode="teeth")
    loop = PredictionLoop(session)

    loop.tick()
    session.renderer.set_mode("eye")
    predictions = loop.tick()

    assert [p.domain for p in predictions] == [Domain.EYE]
    assert session.classifiers[Domain.TEETH].calls == 1


def test_out_of_range_index_uses_synthetic_label(frame_source):
    wide = StubClassifier([0.0] * 7 + [0.95])
    session = make_session(frame_source, mode="teeth", classifiers={Domain.TEETH: wide})

    predictions = PredictionLoop(session).tick()

    assert predictions[0].label == "Class 7"


def test_all_zero_output_is_index_zero_placeholder(frame_source):
    session = make_session(
        frame_source, mode="teeth",
        classifiers={Domain.TEETH: StubClassifier([0.0, 0.0, 0.0])},
    )

    predictions = PredictionLoop(session).tick()

    assert predictions[0].index == 0
    assert predictions[0].confidence == 0.0
    assert session.renderer.panel(Domain.TEETH).class_text == SCANNING_TEXT


def test_not_ready_cycle_is_noop(frame_source):
    session = make_session(frame_source, classifiers={})
    loop = PredictionLoop(session)

    assert loop.tick() == []
    assert frame_source.calls == 0
    assert session.renderer.rendered == []
    assert loop.state is LoopState.IDLE

    session.attach_classifiers({Domain.TEETH: StubClassifier([0.2, 0.8])})
    assert [p.domain for p in loop.tick()] == [Domain.TEETH]


def test_missing_frame_is_noop():
    class NoFrame:
        def current_frame(self):
            return None

    session = make_session(NoFrame())
    assert PredictionLoop(session).tick() == []
    assert session.classifiers[Domain.TEETH].calls == 0


def test_reentrant_tick_is_dropped():
    class ReentrantFrameSource:
        """Requests a new cycle while the current one is still running."""

        def __init__(self):
            self.loop = None
            self.nested_results = []
            self.states = []

        def current_frame(self):
            self.states.append(self.loop.state)
            self.nested_results.append(self.loop.tick())
            return np.zeros((1, 224, 224, 3), dtype=np.float32)

    source = ReentrantFrameSource()
    session = make_session(source, mode="teeth")
    loop = PredictionLoop(session)
    source.loop = loop

    for _ in range(3):
        loop.tick()

    assert source.nested_results == [None, None, None]
    assert source.states == [LoopState.RUNNING] * 3
    assert session.classifiers[Domain.TEETH].calls == 3
    snapshot = loop.stats.snapshot()
    assert snapshot.cycles == 3
    assert snapshot.dropped_ticks == 3


def test_failing_cycle_returns_to_idle(frame_source):
    class Broken:
        def predict(self, batch):
            raise RuntimeError("interpreter crashed")

    session = make_session(frame_source, mode="teeth", classifiers={Domain.TEETH: Broken()})
    loop = PredictionLoop(session)

    assert loop.tick() == []
    assert loop.state is LoopState.IDLE
    assert loop.tick() == []


def test_run_forever_ticks_once_per_refresh(frame_source):
    session = make_session(frame_source, mode="teeth")
    loop = PredictionLoop(session)
    refreshes = []

    def refresh():
        refreshes.append(loop.state)
        return len(refreshes) < 4

    loop.run_forever(refresh)

    assert session.classifiers[Domain.TEETH].calls == 4
    assert refreshes == [LoopState.IDLE] * 4
    assert loop.last_predictions[0].label == "Cavity"
