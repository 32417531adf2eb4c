"""Append-only, time-ordered store of pitch events."""

import bisect
import logging
import threading
from typing import Iterable, Iterator, List, Optional, Tuple

from ..errors import OutOfOrderEventError
from ..models.pitch import PitchEvent
from . import queries

logger = logging.getLogger(__name__)


class PitchTimeline:
    """Pitch events of one session in non-decreasing time order.

    A timeline has a single writer, the session that owns it. Reads may come
    from other threads (a display refreshing while capture runs), so access
    goes through a lock.
    """

    def __init__(self):
        self.events: List[PitchEvent] = []
        self.times: List[float] = []
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[PitchEvent]:
        return iter(self.snapshot())

    def __getitem__(self, index: int) -> PitchEvent:
        return self.events[index]

    def snapshot(self) -> List[PitchEvent]:
        with self.lock:
            return list(self.events)

    @property
    def last_time(self) -> Optional[float]:
        return self.times[-1] if self.times else None

    @property
    def duration(self) -> float:
        """Time of the last event, i.e. the extent from session start."""
        return self.times[-1] if self.times else 0.0

    def append(self, event: PitchEvent) -> None:
        """Append an event.

        Raises:
            OutOfOrderEventError: event.time is earlier than the last event's time
        """
        with self.lock:
            if self.times and event.time < self.times[-1]:
                raise OutOfOrderEventError(event.time, self.times[-1])
            self.events.append(event)
            self.times.append(event.time)

    def extend(self, events: Iterable[PitchEvent]) -> int:
        """Append events in order.

        Returns:
            Number of events appended

        Raises:
            OutOfOrderEventError: at the first out-of-order event; the events
                before it stay appended
        """
        count = 0
        for event in events:
            self.append(event)
            count += 1
        return count

    def clear(self) -> None:
        with self.lock:
            self.events.clear()
            self.times.clear()
        logger.debug("Pitch timeline cleared")

    def _bounds(self, start: Optional[float], end: Optional[float]) -> Tuple[int, int]:
        lo = 0 if start is None else bisect.bisect_left(self.times, start)
        hi = len(self.times) if end is None else bisect.bisect_right(self.times, end)
        return lo, max(lo, hi)

    def filter_by_time_range(self, start: Optional[float] = None,
                             end: Optional[float] = None) -> List[PitchEvent]:
        """Events with start <= time <= end; None leaves that side open."""
        with self.lock:
            lo, hi = self._bounds(start, end)
            return self.events[lo:hi]

    def nearest(self, x: float, y: float,
                projection: queries.Projection,
                max_distance: float,
                start: Optional[float] = None,
                end: Optional[float] = None) -> Optional[PitchEvent]:
        """Event nearest to a point in the caller's (time, midi) -> (x, y) space.

        Only events inside [start, end] are considered.
        """
        return queries.nearest_event(self.filter_by_time_range(start, end),
                                     x, y, projection, max_distance)

    def midi_extent(self, start: Optional[float] = None,
                    end: Optional[float] = None) -> Optional[Tuple[int, int]]:
        """Raw (min_midi, max_midi) of events in range, without widening."""
        events = self.filter_by_time_range(start, end)
        if not events:
            return None
        midis = [event.midi for event in events]
        return min(midis), max(midis)

    def auto_fit_pitch_range(self, start: Optional[float] = None,
                             end: Optional[float] = None) -> Optional[Tuple[int, int]]:
        return queries.auto_fit_pitch_range(self.filter_by_time_range(start, end))

    def segment_breaks(self, start: Optional[float] = None,
                       end: Optional[float] = None) -> List[bool]:
        return queries.segment_breaks(self.filter_by_time_range(start, end))

    def phrases(self, start: Optional[float] = None,
                end: Optional[float] = None) -> List[List[PitchEvent]]:
        return queries.phrases(self.filter_by_time_range(start, end))

    def grid_lines(self, start: float = 0.0, end: Optional[float] = None) -> List[float]:
        return queries.grid_lines(start, self.duration if end is None else end)
