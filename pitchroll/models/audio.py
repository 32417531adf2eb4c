"""Audio-related data models."""

from dataclasses import dataclass, field

import numpy as np


@dataclass
class CaptureStats:
    """Audio capture statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int


@dataclass(frozen=True, eq=False)
class SampleFrame:
    """A fixed-length analysis frame cut from a sample stream.

    The sample array is made read-only on construction so a frame can be
    handed to several consumers without copying.
    """
    samples: np.ndarray
    sample_rate: int
    start_time: float  # Seconds from stream origin
    index: int = 0
    _length: int = field(init=False, repr=False, compare=False, default=0)

    def __post_init__(self):
        samples = np.asarray(self.samples, dtype=np.float64)
        if samples is self.samples:
            samples = samples.copy()
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "_length", samples.shape[0] if samples.ndim else 0)

    def __len__(self) -> int:
        return self._length

    @property
    def duration(self) -> float:
        """Frame duration in seconds."""
        return self._length / self.sample_rate
