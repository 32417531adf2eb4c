"""Event models for the pub/sub capture and detection pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Any, Dict

import numpy as np


@dataclass
class AudioEvent:
    """Audio chunk event with metadata."""
    chunk_id: str
    samples: np.ndarray  # float32 mono samples in [-1, 1]
    timestamp: float  # Unix timestamp when chunk was captured
    sequence_number: int
    sample_rate: int = 44100
    channels: int = 1
    chunk_duration_ms: Optional[int] = None  # Duration of this chunk in milliseconds
    final: bool = False  # True if this is the final chunk for the session

    def __post_init__(self):
        """Calculate chunk duration if not provided."""
        if self.chunk_duration_ms is None and len(self.samples):
            duration_seconds = len(self.samples) / (self.sample_rate * self.channels)
            self.chunk_duration_ms = int(duration_seconds * 1000)


@dataclass
class SessionEvent:
    """Session lifecycle event."""
    session_id: str
    event_type: str  # "started", "stopped", "cancelled", "completed"
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)
