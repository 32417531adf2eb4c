"""Exceptions raised by the PitchRoll core."""


class PitchRollError(Exception):
    """Base class for PitchRoll errors."""


class InvalidFrameError(PitchRollError, ValueError):
    """A frame handed to the estimator has the wrong length or sample rate."""


class OutOfOrderEventError(PitchRollError):
    """An event was appended with a time earlier than the timeline's last event."""

    def __init__(self, event_time: float, last_time: float):
        self.event_time = event_time
        self.last_time = last_time
        super().__init__(
            f"Pitch event at {event_time:.3f}s is earlier than last event at {last_time:.3f}s")


class SessionStateError(PitchRollError, RuntimeError):
    """A session operation was requested in the wrong lifecycle state."""
