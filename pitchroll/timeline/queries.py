"""Pure queries over sequences of pitch events used for visualization."""

import math
from typing import Callable, List, Optional, Sequence, Tuple

from ..models.pitch import PitchEvent

# Consecutive events closer than this belong to the same phrase
PHRASE_GAP_SECONDS = 0.2

# Auto-fitted pitch ranges span at least one octave
MIN_PITCH_SPAN = 12

Projection = Callable[[float, int], Tuple[float, float]]


def auto_fit_pitch_range(events: Sequence[PitchEvent],
                         min_span: int = MIN_PITCH_SPAN) -> Optional[Tuple[int, int]]:
    """MIDI range covering events, widened to at least min_span semitones.

    The missing semitones are split between both ends, the odd one going
    below. Returns None when there are no events.
    """
    if not events:
        return None
    low = min(event.midi for event in events)
    high = max(event.midi for event in events)
    return widen_range(low, high, min_span)


def widen_range(low: int, high: int, min_span: int = MIN_PITCH_SPAN) -> Tuple[int, int]:
    """Widen [low, high] to min_span, extending downward first."""
    deficit = min_span - (high - low)
    if deficit <= 0:
        return low, high
    down = (deficit + 1) // 2
    return low - down, high + (deficit - down)


def segment_breaks(events: Sequence[PitchEvent],
                   gap: float = PHRASE_GAP_SECONDS) -> List[bool]:
    """For each consecutive pair, True if the two events should be drawn connected."""
    return [events[i + 1].time - events[i].time < gap for i in range(len(events) - 1)]


def phrases(events: Sequence[PitchEvent],
            gap: float = PHRASE_GAP_SECONDS) -> List[List[PitchEvent]]:
    """Group events into runs of connected events."""
    groups: List[List[PitchEvent]] = []
    for event, connected in zip(events, [False] + segment_breaks(events, gap)):
        if connected:
            groups[-1].append(event)
        else:
            groups.append([event])
    return groups


def grid_interval(span: float) -> float:
    """Tick spacing in seconds for a visible span."""
    if span > 30:
        return 10.0
    if span > 10:
        return 5.0
    return 1.0


def grid_lines(time_start: float, time_end: float) -> List[float]:
    """Tick times at multiples of grid_interval within [time_start, time_end]."""
    if time_end < time_start:
        return []
    interval = grid_interval(time_end - time_start)
    first = math.ceil(time_start / interval)
    last = math.floor(time_end / interval)
    return [k * interval for k in range(first, last + 1)]


def nearest_event(events: Sequence[PitchEvent],
                  x: float,
                  y: float,
                  projection: Projection,
                  max_distance: float) -> Optional[PitchEvent]:
    """Event closest to (x, y) after projecting (time, midi) into the same space.

    Ties go to the earliest event. Returns None if nothing lies within
    max_distance.
    """
    best: Optional[PitchEvent] = None
    best_distance = math.inf
    for event in events:
        px, py = projection(event.time, event.midi)
        distance = math.hypot(x - px, y - py)
        if distance < best_distance:
            best, best_distance = event, distance

    if best is None or best_distance > max_distance:
        return None
    return best
