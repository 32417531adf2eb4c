"""Pitch timeline storage, visualization queries and viewport state."""

from .timeline import PitchTimeline
from .queries import (
    PHRASE_GAP_SECONDS,
    MIN_PITCH_SPAN,
    auto_fit_pitch_range,
    segment_breaks,
    phrases,
    grid_interval,
    grid_lines,
    nearest_event,
)
from .viewport import Viewport, UNZOOMED, MIN_TIME_SPAN, MIN_PITCH_SELECTION

__all__ = [
    "PitchTimeline",
    "PHRASE_GAP_SECONDS",
    "MIN_PITCH_SPAN",
    "auto_fit_pitch_range",
    "segment_breaks",
    "phrases",
    "grid_interval",
    "grid_lines",
    "nearest_event",
    "Viewport",
    "UNZOOMED",
    "MIN_TIME_SPAN",
    "MIN_PITCH_SELECTION",
]
