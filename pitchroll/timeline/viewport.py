"""Zoom and selection state over a pitch timeline, independent of rendering.

A Viewport is an immutable value. Every transition returns a new Viewport,
and no transition produces an empty or inverted range: requests below the
minimum span are widened, and accidental tiny selections are ignored.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from ..models.pitch import PitchEvent
from . import queries
from .timeline import PitchTimeline

logger = logging.getLogger(__name__)

MIN_TIME_SPAN = 0.1  # seconds
MIN_PITCH_SELECTION = 1.0  # semitones; narrower drags are treated as clicks
MIN_SELECTION_PIXELS = 20.0

DomainTransform = Callable[[float, float], Tuple[float, float]]


@dataclass(frozen=True)
class Viewport:
    """Selected time window and optional MIDI window.

    All-None is the unzoomed state: the full timeline extent with the pitch
    range auto-fitted to the visible events.
    """
    time_start: Optional[float] = None
    time_end: Optional[float] = None
    midi_min: Optional[int] = None
    midi_max: Optional[int] = None

    @property
    def is_zoomed(self) -> bool:
        return self != UNZOOMED

    @property
    def has_time_range(self) -> bool:
        return self.time_start is not None

    @property
    def has_pitch_range(self) -> bool:
        return self.midi_min is not None

    def select_time_range(self, start: float, end: float) -> "Viewport":
        start, end = sorted((float(start), float(end)))
        end = max(end, start + MIN_TIME_SPAN)
        return replace(self, time_start=start, time_end=end)

    def select_pitch_range(self, min_midi: float, max_midi: float) -> "Viewport":
        low, high = sorted((min_midi, max_midi))
        if high - low < MIN_PITCH_SELECTION:
            logger.debug(f"Ignoring degenerate pitch selection {low:.2f}-{high:.2f}")
            return self
        low, high = queries.widen_range(int(math.floor(low)), int(math.ceil(high)))
        return replace(self, midi_min=low, midi_max=high)

    def select_region(self, x0: float, y0: float, x1: float, y1: float,
                      to_domain: DomainTransform,
                      min_pixels: float = MIN_SELECTION_PIXELS) -> "Viewport":
        """Zoom to a dragged rectangle given in pixel coordinates.

        Args:
            x0, y0, x1, y1: Drag corners in pixels
            to_domain: Maps a pixel (x, y) to (time seconds, midi)
            min_pixels: Drags smaller than this in either direction are ignored
        """
        if abs(x1 - x0) < min_pixels or abs(y1 - y0) < min_pixels:
            logger.debug(f"Ignoring {abs(x1 - x0):.0f}x{abs(y1 - y0):.0f}px selection")
            return self
        t0, m0 = to_domain(x0, y0)
        t1, m1 = to_domain(x1, y1)
        return self.select_time_range(t0, t1).select_pitch_range(m0, m1)

    def reset(self) -> "Viewport":
        return UNZOOMED

    def time_window(self, timeline: PitchTimeline) -> Tuple[float, float]:
        """Visible time range; the full timeline extent when not zoomed in time."""
        if self.time_start is not None and self.time_end is not None:
            return self.time_start, self.time_end
        return 0.0, max(timeline.duration, MIN_TIME_SPAN)

    def visible_events(self, timeline: PitchTimeline) -> List[PitchEvent]:
        return timeline.filter_by_time_range(*self.time_window(timeline))

    def pitch_window(self, timeline: PitchTimeline) -> Optional[Tuple[int, int]]:
        """Visible MIDI range; auto-fitted to visible events when not set."""
        if self.midi_min is not None and self.midi_max is not None:
            return self.midi_min, self.midi_max
        return queries.auto_fit_pitch_range(self.visible_events(timeline))

    def grid_lines(self, timeline: PitchTimeline) -> List[float]:
        return queries.grid_lines(*self.time_window(timeline))


UNZOOMED = Viewport()
