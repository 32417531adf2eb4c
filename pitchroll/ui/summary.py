"""Console display of detected notes.

Subscribes to the pitch event topic, keeps the most recent note for a live
readout, and prints a phrase-by-phrase table when the session ends.
"""

import logging
import threading
from typing import List, Optional

from pubsub import pub
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..models.pitch import PitchEvent
from ..pitch.notes import cents_off
from ..timeline import queries

logger = logging.getLogger(__name__)


class PitchSummaryPrinter:
    """Tracks the current note and prints phrase summaries."""

    def __init__(self, topic: str, console: Optional[Console] = None, live: bool = False):
        """Initialize summary printer.

        Args:
            topic: Topic carrying PitchEvents
            console: Rich console to print to
            live: Print every note change as it happens
        """
        self.topic = topic
        self.console = console or Console()
        self.live = live

        self.events: List[PitchEvent] = []
        self.current: Optional[PitchEvent] = None
        self.lock = threading.RLock()

        pub.subscribe(self._on_event, topic)
        logger.info(f"PitchSummaryPrinter initialized - subscribed to {topic}")

    def _on_event(self, event: PitchEvent) -> None:
        with self.lock:
            changed = self.current is None or self.current.midi != event.midi
            self.current = event
            self.events.append(event)

        if self.live and changed:
            self.console.print(self.format_current(event))

    @staticmethod
    def format_current(event: PitchEvent) -> Text:
        cents = cents_off(event.frequency) or 0.0
        text = Text()
        text.append(f"{event.time:7.2f}s  ", style="dim")
        text.append(f"{event.note_name:<4}", style="bold cyan")
        text.append(f" {event.frequency:7.1f} Hz  {cents:+5.0f}c")
        return text

    def build_table(self) -> Table:
        with self.lock:
            groups = queries.phrases(self.events)

        table = Table(title=f"Detected phrases ({len(groups)})")
        table.add_column("#", justify="right")
        table.add_column("Start", justify="right")
        table.add_column("End", justify="right")
        table.add_column("Notes")
        table.add_column("Mean Hz", justify="right")

        for i, group in enumerate(groups, 1):
            names = []
            for event in group:
                if not names or names[-1] != event.note_name:
                    names.append(event.note_name)
            mean_frequency = sum(e.frequency for e in group) / len(group)
            table.add_row(str(i), f"{group[0].time:.2f}", f"{group[-1].time:.2f}",
                          " ".join(names), f"{mean_frequency:.1f}")
        return table

    def print_summary(self) -> None:
        with self.lock:
            count = len(self.events)
        if count == 0:
            self.console.print("[yellow]No pitched notes detected[/yellow]")
            return
        self.console.print(self.build_table())

    def shutdown(self) -> None:
        try:
            pub.unsubscribe(self._on_event, self.topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")
        self.print_summary()
