"""Pitch estimation and note mapping."""

from .yin import YinEstimator, yin_frequency
from .notes import (
    midi_from_frequency,
    frequency_from_midi,
    note_from_midi,
    note_from_frequency,
    note_name,
    cents_off,
    make_pitch_event,
)

__all__ = [
    "YinEstimator",
    "yin_frequency",
    "midi_from_frequency",
    "frequency_from_midi",
    "note_from_midi",
    "note_from_frequency",
    "note_name",
    "cents_off",
    "make_pitch_event",
]
