"""Detection pipeline: frame -> estimate -> note -> timeline append."""

import time
import logging
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from ..audio.frames import LiveFrameSource, frames_from_buffer, count_frames
from ..config import PitchSettings
from ..errors import InvalidFrameError
from ..models.audio import SampleFrame
from ..models.events import AudioEvent
from ..models.pitch import PitchEvent
from ..models.session import DetectionStats
from ..pitch.notes import make_pitch_event
from ..pitch.yin import YinEstimator
from ..timeline.timeline import PitchTimeline

logger = logging.getLogger(__name__)


class PitchDetectionService:
    """Runs every frame of one session through estimation and into its timeline.

    All processing happens on the caller's thread: the capture thread for live
    sessions, the analysing thread for files. That thread is the timeline's
    only writer.
    """

    def __init__(self,
                 settings: PitchSettings,
                 timeline: PitchTimeline,
                 result_callback: Optional[Callable[[PitchEvent], None]] = None,
                 clock: Callable[[], float] = time.monotonic,
                 perf_clock: Callable[[], float] = time.perf_counter):
        """Initialize detection service.

        Args:
            settings: Framing, estimator and band settings
            timeline: Timeline that receives accepted events
            result_callback: Called with every accepted PitchEvent
            clock: Wall clock used to stamp live frames
            perf_clock: Clock used to measure the per-frame budget
        """
        self.settings = settings
        self.timeline = timeline
        self.result_callback = result_callback
        self.perf_clock = perf_clock

        self.estimator = YinEstimator(
            sample_rate=settings.sample_rate,
            frame_length=settings.frame_length,
            threshold=settings.threshold,
        )
        self.frame_source = LiveFrameSource(
            sample_rate=settings.sample_rate,
            frame_length=settings.frame_length,
            hop_length=settings.hop_length,
            clock=clock,
        )
        self.stats = DetectionStats()
        self._budget_warned = False

    def reset(self) -> None:
        """Forget all state from a previous session."""
        self.timeline.clear()
        self.frame_source.reset()
        self.stats = DetectionStats()
        self._budget_warned = False

    def in_band(self, frequency: float) -> bool:
        return self.settings.min_frequency < frequency < self.settings.max_frequency

    def process_frame(self, frame: SampleFrame,
                      estimator: Optional[YinEstimator] = None) -> Optional[PitchEvent]:
        """Estimate one frame and append the resulting event, if any.

        Returns:
            The appended PitchEvent, or None for unvoiced or out-of-band frames

        Raises:
            InvalidFrameError: the frame does not match the estimator
            OutOfOrderEventError: the frame is earlier than the timeline's last event
        """
        estimate = (estimator or self.estimator).estimate(frame)
        self.stats.frames_processed += 1

        if not estimate.is_voiced:
            self.stats.frames_unvoiced += 1
            return None

        if not self.in_band(estimate.frequency):
            self.stats.frames_out_of_band += 1
            logger.debug(f"Frame {frame.index}: {estimate.frequency:.1f}Hz outside accepted band")
            return None

        event = make_pitch_event(frame.start_time, estimate.frequency)
        self.timeline.append(event)
        self.stats.events_accepted += 1

        if self.result_callback:
            self.result_callback(event)
        return event

    def process_live_frames(self, frames: List[SampleFrame]) -> List[PitchEvent]:
        """Process frames that became ready together, within the hop budget.

        Once the batch has used more than one hop interval, the frames still
        waiting are dropped rather than queued, so latency stays bounded.
        """
        events: List[PitchEvent] = []
        budget = self.settings.hop_seconds
        batch_start = self.perf_clock()

        for i, frame in enumerate(frames):
            if i > 0 and self.perf_clock() - batch_start > budget:
                dropped = len(frames) - i
                self.stats.frames_dropped += dropped
                logger.debug(f"Dropped {dropped} frames to stay within {budget * 1000:.1f}ms budget")
                break

            frame_start = self.perf_clock()
            event = self.process_frame(frame)
            elapsed = self.perf_clock() - frame_start

            self.stats.max_frame_seconds = max(self.stats.max_frame_seconds, elapsed)
            if elapsed > budget and not self._budget_warned:
                logger.warning(f"Frame processing took {elapsed * 1000:.1f}ms, "
                               f"over the {budget * 1000:.1f}ms hop budget; frames will be dropped")
                self._budget_warned = True

            if event is not None:
                events.append(event)
        return events

    def on_audio_chunk(self, event: AudioEvent) -> List[PitchEvent]:
        """Feed one captured chunk through the live frame source."""
        if event.sample_rate != self.frame_source.sample_rate:
            raise InvalidFrameError(
                f"Chunk {event.chunk_id} has sample rate {event.sample_rate}Hz, "
                f"expected {self.frame_source.sample_rate}Hz")
        frames = self.frame_source.push(event.samples)
        if not frames:
            return []
        return self.process_live_frames(frames)

    def iter_analysis(self, samples: np.ndarray, sample_rate: int,
                      chunk_frames: Optional[int] = None) -> Iterator[Tuple[int, int]]:
        """Analyse a decoded buffer, yielding (frames_done, frames_total) between chunks.

        The caller drives the generator and can stop between chunks; no event
        is ever half-appended.
        """
        chunk_frames = chunk_frames or self.settings.yield_every
        estimator = self.estimator
        if sample_rate != self.estimator.sample_rate:
            estimator = YinEstimator(sample_rate=sample_rate,
                                     frame_length=self.settings.frame_length,
                                     threshold=self.settings.threshold)

        total = count_frames(len(samples), self.settings.frame_length, self.settings.hop_length)
        logger.info(f"Analysing {total} frames ({len(samples) / sample_rate:.2f}s at {sample_rate}Hz)")

        done = 0
        frames = frames_from_buffer(samples, sample_rate,
                                    self.settings.frame_length, self.settings.hop_length)
        for frame in frames:
            self.process_frame(frame, estimator)
            done += 1
            if done % chunk_frames == 0:
                yield done, total
        if done % chunk_frames != 0 or total == 0:
            yield done, total

    def analyze_buffer(self, samples: np.ndarray, sample_rate: int) -> int:
        """Analyse a whole buffer synchronously; returns the number of events added."""
        before = self.stats.events_accepted
        for _ in self.iter_analysis(samples, sample_rate):
            pass
        return self.stats.events_accepted - before

    def process_frames(self, frames: Iterable[SampleFrame]) -> List[PitchEvent]:
        """Process already-cut frames in order, without any budget."""
        events = []
        for frame in frames:
            event = self.process_frame(frame)
            if event is not None:
                events.append(event)
        return events
