"""Unit tests for the console note summary."""

import io

import pytest
from pubsub import pub
from rich.console import Console

from pitchroll.pitch.notes import make_pitch_event, frequency_from_midi
from pitchroll.pitch.publisher import PitchPublisher
from pitchroll.ui.summary import PitchSummaryPrinter


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.mark.unit
class TestPitchSummaryPrinter:
    """Test cases for PitchSummaryPrinter."""

    def test_collects_published_events(self, console):
        topic = "test.summary.collect"
        printer = PitchSummaryPrinter(topic, console=console)
        publisher = PitchPublisher(topic)

        publisher.publish_pitch_event(make_pitch_event(0.0, 440.0))
        publisher.publish_pitch_event(make_pitch_event(0.1, 445.0))

        assert len(printer.events) == 2
        assert printer.current.time == 0.1
        printer.shutdown()

    def test_live_prints_note_changes_only(self, console):
        topic = "test.summary.live"
        printer = PitchSummaryPrinter(topic, console=console, live=True)

        for time, midi in [(0.0, 69), (0.1, 69), (0.2, 71)]:
            pub.sendMessage(topic, event=make_pitch_event(time, frequency_from_midi(midi)))

        lines = [line for line in console.file.getvalue().splitlines() if line.strip()]
        assert len(lines) == 2
        assert "A4" in lines[0]
        assert "B4" in lines[1]
        printer.shutdown()

    def test_format_current(self):
        text = PitchSummaryPrinter.format_current(make_pitch_event(1.5, 440.0))

        assert "A4" in text.plain
        assert "440.0 Hz" in text.plain
        assert "+0c" in text.plain

    def test_summary_table_groups_phrases(self, console):
        topic = "test.summary.table"
        printer = PitchSummaryPrinter(topic, console=console)
        for time, midi in [(0.0, 60), (0.1, 62), (1.0, 64)]:
            pub.sendMessage(topic, event=make_pitch_event(time, frequency_from_midi(midi)))

        table = printer.build_table()
        printer.shutdown()

        assert table.row_count == 2
        output = console.file.getvalue()
        assert "C4 D4" in output
        assert "E4" in output

    def test_empty_summary(self, console):
        printer = PitchSummaryPrinter("test.summary.empty", console=console)

        printer.shutdown()

        assert "No pitched notes detected" in console.file.getvalue()

    def test_shutdown_unsubscribes(self, console):
        topic = "test.summary.unsubscribe"
        printer = PitchSummaryPrinter(topic, console=console)
        printer.shutdown()

        pub.sendMessage(topic, event=make_pitch_event(0.0, 440.0))

        assert printer.events == []
