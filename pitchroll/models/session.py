"""Session-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SessionState(Enum):
    """Lifecycle state of a capture or analysis session."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


@dataclass
class DetectionStats:
    """Counters kept by the detection pipeline for one session."""
    frames_processed: int = 0
    frames_dropped: int = 0
    frames_unvoiced: int = 0
    frames_out_of_band: int = 0
    events_accepted: int = 0
    max_frame_seconds: float = 0.0


@dataclass
class SessionInfo:
    """Information about a capture or analysis session."""
    session_id: str
    mode: str  # "live" or "file"
    start_time: datetime
    state: SessionState = SessionState.IDLE
    end_time: Optional[datetime] = None
    source: Optional[str] = None  # File path for analysis sessions
    stats: DetectionStats = field(default_factory=DetectionStats)

    @property
    def duration_seconds(self) -> float:
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()
