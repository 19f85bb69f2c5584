import numpy as np
import pytest

from healthscan.classify.domains import Domain
from healthscan.processing.display import (
    DisplayHandler,
    PanelBoard,
    PanelState,
    SCANNING_TEXT,
    Severity,
    WAITING_TEXT,
    classify_severity,
    confidence_percent,
    key_to_mode,
)


@pytest.mark.parametrize("label, severity", [
    ("Healthy Gums", Severity.BENIGN),
    ("Normal", Severity.BENIGN),
    ("Early Cavity", Severity.CONCERNING),
    ("Tooth DECAY", Severity.CONCERNING),
    ("diabetic_retinopathy", Severity.CONCERNING),
    ("glaucoma", Severity.CONCERNING),
    ("Mild Irregularity", Severity.NEUTRAL),
    ("Gingivitis", Severity.NEUTRAL),
])
def test_classify_severity(label, severity):
    assert classify_severity(label) is severity


def test_confidence_percent_rounds_half_up():
    assert confidence_percent(0.873) == 87
    assert confidence_percent(0.625) == 63
    assert confidence_percent(1.0) == 100


def test_threshold_is_exclusive():
    board = PanelBoard(threshold=0.50)
    state = board.render("Cavity", 0.50, Domain.TEETH)
    assert state == PanelState()
    assert state.class_text == SCANNING_TEXT
    assert state.confidence_text == WAITING_TEXT
    assert state.bar_percent == 0
    assert state.severity is None


def test_confident_render():
    board = PanelBoard(threshold=0.50)
    state = board.render("Early Cavity", 0.873, Domain.TEETH)
    assert state.class_text == "Early Cavity"
    assert state.bar_percent == 87
    assert state.confidence_text == "87% Confidence"
    assert state.severity is Severity.CONCERNING
    assert board.panel(Domain.TEETH) is state


def test_panels_are_independent():
    board = PanelBoard()
    board.render("Normal", 0.9, Domain.EYE)
    board.render("Healthy", 0.3, Domain.TEETH)
    assert board.panel(Domain.EYE).class_text == "Normal"
    assert board.panel(Domain.TEETH).class_text == SCANNING_TEXT


def test_low_confidence_resets_panel():
    board = PanelBoard()
    board.render("Calculus", 0.8, Domain.TEETH)
    board.render("Calculus", 0.2, Domain.TEETH)
    assert board.panel(Domain.TEETH).bar_percent == 0
    assert not board.panel(Domain.TEETH).is_confident


def test_mode_controls_active_and_visible_domains():
    board = PanelBoard(mode="both")
    assert board.active_domains() == (Domain.TEETH, Domain.EYE)
    board.set_mode("eye")
    assert board.mode == "eye"
    assert board.visible_domains() == (Domain.EYE,)
    with pytest.raises(ValueError):
        board.set_mode("ear")


def test_key_to_mode():
    assert key_to_mode(ord('t')) == "teeth"
    assert key_to_mode(ord('e')) == "eye"
    assert key_to_mode(ord('b')) == "both"
    assert key_to_mode(-1) is None


def test_draw_panels_changes_frame():
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    board = PanelBoard()
    board.render("Healthy", 0.95, Domain.TEETH)

    DisplayHandler().draw_panels(frame, board)

    assert frame.any()


def test_disabled_handler_draws_nothing():
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    handler = DisplayHandler(overlay_enabled=False)
    handler.draw_panels(frame, PanelBoard())
    handler.draw_message(frame, "Loading...")
    assert not frame.any()
    assert handler.show("x", frame) == -1
