"""Frame sources that slice sample streams into fixed-size analysis frames."""

import time
import logging
from typing import Callable, Iterator, List, Optional

import numpy as np

from ..models.audio import SampleFrame

logger = logging.getLogger(__name__)


def _check_framing(frame_length: int, hop_length: int) -> None:
    if frame_length < 1:
        raise ValueError(f"frame_length must be positive, got {frame_length}")
    if not 0 < hop_length <= frame_length:
        raise ValueError(f"hop_length must be in (0, {frame_length}], got {hop_length}")


def frames_from_buffer(samples: np.ndarray,
                       sample_rate: int,
                       frame_length: int = 4096,
                       hop_length: int = 1024) -> Iterator[SampleFrame]:
    """Lazily stride a decoded buffer into overlapping frames.

    Frames start every ``hop_length`` samples and are stamped with
    ``index * hop_length / sample_rate``. A trailing partial frame is dropped.

    Args:
        samples: 1-D array of samples
        sample_rate: Sample rate of the buffer in Hz
        frame_length: Samples per frame (N)
        hop_length: Samples between frame starts (H)

    Yields:
        SampleFrame objects in increasing time order
    """
    _check_framing(frame_length, hop_length)
    samples = np.asarray(samples)
    if samples.ndim != 1:
        raise ValueError(f"Expected a 1-D sample buffer, got shape {samples.shape}")

    index = 0
    start = 0
    while start + frame_length <= samples.shape[0]:
        yield SampleFrame(
            samples=samples[start:start + frame_length],
            sample_rate=sample_rate,
            start_time=start / sample_rate,
            index=index,
        )
        index += 1
        start = index * hop_length


def count_frames(num_samples: int, frame_length: int, hop_length: int) -> int:
    """Number of frames frames_from_buffer yields for a buffer of num_samples."""
    _check_framing(frame_length, hop_length)
    if num_samples < frame_length:
        return 0
    return (num_samples - frame_length) // hop_length + 1


class LiveFrameSource:
    """Turns pushed audio chunks from a live stream into analysis frames.

    Keeps only the samples needed for the next frame, so memory stays bounded
    at roughly one frame plus one chunk regardless of session length.
    """

    def __init__(self,
                 sample_rate: int,
                 frame_length: int = 4096,
                 hop_length: int = 1024,
                 clock: Callable[[], float] = time.monotonic):
        _check_framing(frame_length, hop_length)
        self.sample_rate = sample_rate
        self.frame_length = frame_length
        self.hop_length = hop_length
        self.clock = clock

        self.start_time: Optional[float] = None
        self._buffer = np.zeros(0, dtype=np.float64)
        self._buffer_offset = 0  # Absolute index of _buffer[0]
        self._next_frame_end = frame_length
        self.frame_counter = 0
        self.total_samples = 0

    @property
    def is_started(self) -> bool:
        return self.start_time is not None

    def start(self) -> None:
        """Reset state and mark the stream origin at the current clock time."""
        self.reset()
        self.start_time = self.clock()
        logger.debug(f"LiveFrameSource started: N={self.frame_length}, H={self.hop_length}, "
                     f"{self.sample_rate}Hz")

    def reset(self) -> None:
        self.start_time = None
        self._buffer = np.zeros(0, dtype=np.float64)
        self._buffer_offset = 0
        self._next_frame_end = self.frame_length
        self.frame_counter = 0
        self.total_samples = 0

    def elapsed(self) -> float:
        """Wall-clock seconds since start()."""
        if self.start_time is None:
            return 0.0
        return self.clock() - self.start_time

    def push(self, samples: np.ndarray) -> List[SampleFrame]:
        """Add a chunk of samples and return any frames that became complete.

        Frames are returned oldest first. All frames completed by one push share
        the wall-clock time of the push.
        """
        if self.start_time is None:
            self.start()

        chunk = np.asarray(samples, dtype=np.float64).ravel()
        if chunk.size == 0:
            return []

        self._buffer = np.concatenate((self._buffer, chunk))
        self.total_samples += chunk.size
        available_end = self._buffer_offset + self._buffer.size

        frames: List[SampleFrame] = []
        if self._next_frame_end <= available_end:
            now = self.elapsed()
            while self._next_frame_end <= available_end:
                begin = self._next_frame_end - self.frame_length - self._buffer_offset
                frames.append(SampleFrame(
                    samples=self._buffer[begin:begin + self.frame_length],
                    sample_rate=self.sample_rate,
                    start_time=now,
                    index=self.frame_counter,
                ))
                self.frame_counter += 1
                self._next_frame_end += self.hop_length

        # Drop samples that no future frame will need
        keep_from = self._next_frame_end - self.frame_length - self._buffer_offset
        if keep_from > 0:
            self._buffer = self._buffer[keep_from:]
            self._buffer_offset += keep_from

        return frames
