"""Data models for the PitchRoll application."""

from .audio import CaptureStats, SampleFrame
from .events import AudioEvent, SessionEvent
from .pitch import PITCH_CLASS_NAMES, PitchEstimate, UNVOICED, NoteLabel, PitchEvent
from .session import SessionState, DetectionStats, SessionInfo

__all__ = [
    "CaptureStats",
    "SampleFrame",
    "AudioEvent",
    "SessionEvent",
    "PITCH_CLASS_NAMES",
    "PitchEstimate",
    "UNVOICED",
    "NoteLabel",
    "PitchEvent",
    "SessionState",
    "DetectionStats",
    "SessionInfo",
]
