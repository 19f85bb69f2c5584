# healthscan/processing/display.py
"""
Display/UI module.

Two layers:
- PanelBoard: pure state. Maps (label, confidence, domain) to what each
  result panel shows, and which panels are visible for the current mode.
- DisplayHandler: draws the visible panels onto the camera frame with OpenCV.

Usage:
    from healthscan.processing.display import PanelBoard, DisplayHandler

    board = PanelBoard(threshold=0.5)
    board.render("Healthy", 0.87, Domain.TEETH)

    display = DisplayHandler()
    display.draw_panels(frame, board)
    key = display.show("HealthScan", frame)
"""
import math
import cv2
import numpy as np
from typing import Dict, Optional, Tuple
from dataclasses import dataclass
from enum import Enum

from ..classify.domains import Domain, parse_mode

SCANNING_TEXT = "Scanning..."
WAITING_TEXT = "Waiting for clearer view..."

BENIGN_KEYWORDS = ('healthy', 'normal')
CONCERNING_KEYWORDS = ('cavity', 'decay', 'caries', 'cataract', 'glaucoma', 'retinopathy')


class Severity(Enum):
    """Colour/urgency bucket derived from the label text."""
    BENIGN = "benign"
    CONCERNING = "concerning"
    NEUTRAL = "neutral"


def classify_severity(label: str) -> Severity:
    """Case-insensitive keyword match; benign keywords win."""
    lower = label.lower()
    if any(keyword in lower for keyword in BENIGN_KEYWORDS):
        return Severity.BENIGN
    if any(keyword in lower for keyword in CONCERNING_KEYWORDS):
        return Severity.CONCERNING
    return Severity.NEUTRAL


def confidence_percent(confidence: float) -> int:
    """confidence * 100 rounded half up (0.873 -> 87, 0.625 -> 63)."""
    return int(math.floor(confidence * 100 + 0.5))


@dataclass(frozen=True)
class PanelState:
    """What one result panel currently shows."""
    class_text: str = SCANNING_TEXT
    bar_percent: int = 0
    confidence_text: str = WAITING_TEXT
    severity: Optional[Severity] = None    # None = default text colour

    @property
    def is_confident(self) -> bool:
        return self.severity is not None


PLACEHOLDER = PanelState()


class PanelBoard:
    """
    Result panels, one per domain, plus mode-driven visibility.
    """

    def __init__(self, threshold: float = 0.50, mode: str = "both"):
        self.threshold = threshold
        self._panels: Dict[Domain, PanelState] = {domain: PLACEHOLDER for domain in Domain}
        self._active: Tuple[Domain, ...] = parse_mode(mode)

    def render(self, label: str, confidence: float, target: Domain) -> PanelState:
        """
        Update the panel of `target`.

        confidence > threshold: label, rounded bar width and severity colour.
        Otherwise the scanning placeholder.
        """
        if confidence > self.threshold:
            pct = confidence_percent(confidence)
            state = PanelState(
                class_text=label,
                bar_percent=pct,
                confidence_text=f"{pct}% Confidence",
                severity=classify_severity(label)
            )
        else:
            state = PLACEHOLDER
        self._panels[target] = state
        return state

    def panel(self, domain: Domain) -> PanelState:
        return self._panels[domain]

    # === MODE ===
    def set_mode(self, mode: str):
        """Switch between 'both', 'teeth' and 'eye'. Read by the next cycle."""
        self._active = parse_mode(mode)

    @property
    def mode(self) -> str:
        if len(self._active) > 1:
            return "both"
        return self._active[0].value

    def active_domains(self) -> Tuple[Domain, ...]:
        return self._active

    def visible_domains(self) -> Tuple[Domain, ...]:
        return self._active


@dataclass
class ColorScheme:
    """Colours per severity (BGR)."""
    SUCCESS: Tuple[int, int, int] = (94, 197, 34)        # green
    DANGER: Tuple[int, int, int] = (68, 68, 239)         # red
    WARNING: Tuple[int, int, int] = (11, 158, 245)       # orange
    TEXT_PRIMARY: Tuple[int, int, int] = (255, 255, 255)
    TEXT_MUTED: Tuple[int, int, int] = (200, 200, 200)
    PANEL_BG: Tuple[int, int, int] = (40, 40, 40)
    BAR_BG: Tuple[int, int, int] = (100, 100, 100)

    def for_severity(self, severity: Optional[Severity]) -> Tuple[int, int, int]:
        if severity is Severity.BENIGN:
            return self.SUCCESS
        if severity is Severity.CONCERNING:
            return self.DANGER
        if severity is Severity.NEUTRAL:
            return self.WARNING
        return self.TEXT_PRIMARY


class DisplayHandler:
    """
    Draws result panels and status text onto frames.
    """

    def __init__(
        self,
        overlay_enabled: bool = True,
        colors: Optional[ColorScheme] = None,
        font: int = cv2.FONT_HERSHEY_SIMPLEX,
        font_scale: float = 0.6,
        thickness: int = 2,
        panel_width: int = 260
    ):
        """
        Args:
            overlay_enabled: False in headless mode (all drawing is skipped)
            colors: Custom ColorScheme
            font: OpenCV font
            font_scale: Text size
            thickness: Stroke width
            panel_width: Width of one result panel in pixels
        """
        self.enabled = overlay_enabled
        self.colors = colors or ColorScheme()
        self.font = font
        self.font_scale = font_scale
        self.thickness = thickness
        self.panel_width = panel_width

    def draw_panel(
        self,
        frame: np.ndarray,
        title: str,
        state: PanelState,
        origin: Tuple[int, int]
    ):
        """
        Draw one result panel.

        Args:
            frame: Frame to draw on
            title: Panel heading
            state: PanelState to show
            origin: Top-left corner (x, y)
        """
        if not self.enabled:
            return

        x, y = origin
        w, h = self.panel_width, 96
        color = self.colors.for_severity(state.severity)

        # Background
        cv2.rectangle(frame, (x, y), (x + w, y + h), self.colors.PANEL_BG, -1)

        cv2.putText(frame, title, (x + 10, y + 20),
                    self.font, 0.5, self.colors.TEXT_MUTED, 1)
        cv2.putText(frame, state.class_text, (x + 10, y + 46),
                    self.font, self.font_scale, color, self.thickness)

        # Confidence bar
        bar_x, bar_y = x + 10, y + 58
        bar_w, bar_h = w - 20, 10
        cv2.rectangle(frame, (bar_x, bar_y), (bar_x + bar_w, bar_y + bar_h),
                      self.colors.BAR_BG, -1)
        fill = int(bar_w * min(state.bar_percent, 100) / 100)
        if fill > 0:
            cv2.rectangle(frame, (bar_x, bar_y), (bar_x + fill, bar_y + bar_h), color, -1)

        cv2.putText(frame, state.confidence_text, (x + 10, y + 88),
                    self.font, 0.45, self.colors.TEXT_MUTED, 1)

    def draw_panels(self, frame: np.ndarray, board: PanelBoard, margin: int = 10):
        """Draw every visible panel, stacked from the top-left corner."""
        if not self.enabled:
            return
        y = margin
        for domain in board.visible_domains():
            self.draw_panel(frame, domain.title, board.panel(domain), (margin, y))
            y += 96 + margin

    def draw_stats(self, frame: np.ndarray, stats: Dict[str, float], mode: str):
        """Cycle timing and mode, bottom-left."""
        if not self.enabled:
            return

        parts = [f"Mode:{mode}"]
        if 'avg_cycle_ms' in stats:
            parts.append(f"{stats['avg_cycle_ms']:.0f}ms")
        if 'dropped_ticks' in stats:
            parts.append(f"dropped:{stats['dropped_ticks']}")

        h = frame.shape[0]
        cv2.putText(frame, " | ".join(parts), (10, h - 10),
                    self.font, 0.4, self.colors.TEXT_MUTED, 1)

    def draw_message(self, frame: np.ndarray, text: str, error: bool = False):
        """Centered overlay message (loading / fatal error)."""
        if not self.enabled:
            return
        h, w = frame.shape[:2]
        color = self.colors.DANGER if error else self.colors.TEXT_PRIMARY
        (tw, th), _ = cv2.getTextSize(text, self.font, self.font_scale, self.thickness)
        cv2.putText(frame, text, (max(0, (w - tw) // 2), (h + th) // 2),
                    self.font, self.font_scale, color, self.thickness)

    def show(self, window_name: str, frame: np.ndarray) -> int:
        """
        Show the frame and return the pressed key.

        Returns:
            Key code or -1 if none
        """
        if not self.enabled:
            return -1

        cv2.imshow(window_name, frame)
        return cv2.waitKey(1) & 0xFF

    def destroy_windows(self):
        cv2.destroyAllWindows()


def key_to_mode(key: int) -> Optional[str]:
    """Mode toggle keys: t = teeth, e = eye, b = both."""
    return {ord('t'): "teeth", ord('e'): "eye", ord('b'): "both"}.get(key)


if __name__ == "__main__":
    print("=== Testing DisplayHandler ===\n")

    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    frame[:] = (50, 50, 50)

    board = PanelBoard()
    board.render("Early Cavity", 0.873, Domain.TEETH)
    board.render("Normal", 0.64, Domain.EYE)

    display = DisplayHandler()
    display.draw_panels(frame, board)
    display.draw_stats(frame, {'avg_cycle_ms': 42, 'dropped_ticks': 3}, board.mode)

    cv2.imshow("Display Test", frame)
    cv2.waitKey(0)
    cv2.destroyAllWindows()
