"""Equal-temperament mapping between frequency, MIDI number and note name."""

import math
from typing import Optional

from ..models.pitch import NoteLabel, PitchEvent

A4_FREQUENCY = 440.0
A4_MIDI = 69

# Anything below this is numerical noise rather than an audible pitch
MIN_AUDIBLE_FREQUENCY = 20.0


def midi_from_frequency(frequency: float) -> Optional[int]:
    """Nearest MIDI number for a frequency, or None below the audible floor or non-finite.

    Halves round up, so a frequency exactly between two semitones maps to the
    higher note.
    """
    if not frequency or not math.isfinite(frequency) or frequency < MIN_AUDIBLE_FREQUENCY:
        return None
    return int(math.floor(12 * math.log2(frequency / A4_FREQUENCY) + A4_MIDI + 0.5))


def frequency_from_midi(midi: float) -> float:
    return A4_FREQUENCY * 2 ** ((midi - A4_MIDI) / 12)


def note_from_midi(midi: int) -> NoteLabel:
    return NoteLabel.from_midi(int(midi))


def note_from_frequency(frequency: float) -> Optional[NoteLabel]:
    """Note label for a frequency, or None ("no note") below the audible floor."""
    midi = midi_from_frequency(frequency)
    if midi is None:
        return None
    return note_from_midi(midi)


def note_name(frequency: float) -> str:
    """Note name such as "A4", or an empty string when there is no note."""
    label = note_from_frequency(frequency)
    return str(label) if label is not None else ''


def cents_off(frequency: float) -> Optional[float]:
    """Signed deviation in cents from the nearest equal-tempered note."""
    midi = midi_from_frequency(frequency)
    if midi is None:
        return None
    return 1200 * math.log2(frequency / frequency_from_midi(midi))


def make_pitch_event(time: float, frequency: float) -> Optional[PitchEvent]:
    """Build a PitchEvent whose note and midi are derived from frequency."""
    midi = midi_from_frequency(frequency)
    if midi is None:
        return None
    return PitchEvent(time=float(time), frequency=float(frequency),
                      note=note_from_midi(midi), midi=midi)
