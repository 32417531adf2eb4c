"""Pitch estimation and note data models."""

from dataclasses import dataclass
from typing import Optional

PITCH_CLASS_NAMES = ('C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B')


@dataclass(frozen=True)
class PitchEstimate:
    """Result of estimating one frame: voiced with a frequency, or unvoiced."""
    frequency: Optional[float] = None

    def __post_init__(self):
        if self.frequency is not None and not self.frequency > 0:
            raise ValueError(f"Voiced estimate needs a positive frequency, got {self.frequency}")

    @property
    def is_voiced(self) -> bool:
        return self.frequency is not None

    @classmethod
    def voiced(cls, frequency: float) -> "PitchEstimate":
        return cls(frequency=float(frequency))


UNVOICED = PitchEstimate()


@dataclass(frozen=True)
class NoteLabel:
    """Pitch class plus octave, e.g. A4 or C#-1."""
    pitch_class: int  # 0 = C
    octave: int

    @classmethod
    def from_midi(cls, midi: int) -> "NoteLabel":
        return cls(pitch_class=midi % 12, octave=midi // 12 - 1)

    @property
    def name(self) -> str:
        return PITCH_CLASS_NAMES[self.pitch_class]

    @property
    def midi(self) -> int:
        return (self.octave + 1) * 12 + self.pitch_class

    def __str__(self) -> str:
        return f"{self.name}{self.octave}"


@dataclass(frozen=True)
class PitchEvent:
    """An accepted pitch detection placed on the timeline."""
    time: float       # Seconds from session start
    frequency: float  # Hz
    note: NoteLabel
    midi: int

    @property
    def note_name(self) -> str:
        return str(self.note)
