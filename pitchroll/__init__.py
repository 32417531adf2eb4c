"""PitchRoll: real-time monophonic pitch detection and note timelines."""

__version__ = "0.1.0"
