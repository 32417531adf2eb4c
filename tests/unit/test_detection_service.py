"""Unit tests for PitchDetectionService."""

import pytest
import numpy as np
from unittest.mock import MagicMock

from pitchroll.audio.frames import frames_from_buffer
from pitchroll.config import PitchSettings
from pitchroll.errors import InvalidFrameError, OutOfOrderEventError
from pitchroll.models.audio import SampleFrame
from pitchroll.models.events import AudioEvent
from pitchroll.pitch.notes import make_pitch_event
from pitchroll.services.detection_service import PitchDetectionService
from pitchroll.timeline.timeline import PitchTimeline


def chunk_event(samples, sequence=0, sample_rate=44100):
    return AudioEvent(
        chunk_id=f"chunk_{sequence}",
        samples=np.asarray(samples, dtype=np.float32),
        timestamp=0.0,
        sequence_number=sequence,
        sample_rate=sample_rate,
    )


@pytest.fixture
def timeline():
    return PitchTimeline()


@pytest.fixture
def result_callback():
    return MagicMock()


@pytest.fixture
def service(settings, timeline, result_callback, fake_clock):
    return PitchDetectionService(settings, timeline, result_callback, clock=fake_clock)


@pytest.mark.unit
class TestProcessFrame:
    """Test cases for single-frame processing."""

    def test_voiced_frame_appended(self, service, timeline, result_callback, sine_wave):
        frame = SampleFrame(samples=sine_wave(440.0), sample_rate=44100, start_time=1.25)

        event = service.process_frame(frame)

        assert event.midi == 69
        assert event.note_name == "A4"
        assert event.time == 1.25
        assert list(timeline) == [event]
        result_callback.assert_called_once_with(event)
        assert service.stats.events_accepted == 1

    def test_silent_frame_skipped(self, service, timeline, result_callback):
        frame = SampleFrame(samples=np.zeros(4096), sample_rate=44100, start_time=0.0)

        assert service.process_frame(frame) is None
        assert len(timeline) == 0
        assert service.stats.frames_unvoiced == 1
        result_callback.assert_not_called()

    @pytest.mark.parametrize("frequency", [50.0, 3000.0])
    def test_out_of_band_frame_skipped(self, service, timeline, sine_wave, frequency):
        frame = SampleFrame(samples=sine_wave(frequency), sample_rate=44100, start_time=0.0)

        assert service.process_frame(frame) is None
        assert len(timeline) == 0
        assert service.stats.frames_out_of_band == 1

    def test_band_is_open_interval(self, service):
        assert not service.in_band(80.0)
        assert service.in_band(80.01)
        assert not service.in_band(2000.0)

    def test_invalid_frame_propagates(self, service, sine_wave):
        frame = SampleFrame(samples=sine_wave(440.0, num_samples=1000), sample_rate=44100,
                            start_time=0.0)

        with pytest.raises(InvalidFrameError):
            service.process_frame(frame)

    def test_out_of_order_propagates(self, service, timeline, sine_wave):
        timeline.append(make_pitch_event(10.0, 440.0))
        frame = SampleFrame(samples=sine_wave(440.0), sample_rate=44100, start_time=2.0)

        with pytest.raises(OutOfOrderEventError):
            service.process_frame(frame)
        assert len(timeline) == 1


@pytest.mark.unit
class TestLiveProcessing:
    """Test cases for live chunk handling and the per-frame budget."""

    def test_chunks_produce_events(self, service, timeline, fake_clock, sine_wave):
        service.frame_source.start()
        signal = sine_wave(220.0, num_samples=8192)

        for i in range(8):
            fake_clock.advance(1024 / 44100)
            service.on_audio_chunk(chunk_event(signal[i * 1024:(i + 1) * 1024], i))

        assert len(timeline) == 5
        assert all(e.midi == 57 for e in timeline)
        times = [e.time for e in timeline]
        assert times == sorted(times)

    def test_sample_rate_mismatch_rejected(self, service):
        with pytest.raises(InvalidFrameError):
            service.on_audio_chunk(chunk_event(np.zeros(1024), sample_rate=48000))

    def test_overrun_drops_remaining_frames(self, settings, timeline, fake_clock,
                                            clock_factory, sine_wave):
        # Every perf_clock read advances one second, far beyond the 23ms budget
        service = PitchDetectionService(settings, timeline, clock=fake_clock,
                                        perf_clock=clock_factory(step=1.0))
        service.frame_source.start()

        events = service.on_audio_chunk(chunk_event(sine_wave(440.0, num_samples=6144)))

        assert len(events) == 1
        assert service.stats.frames_processed == 1
        assert service.stats.frames_dropped == 2
        assert len(timeline) == 1

    def test_fast_processing_drops_nothing(self, settings, timeline, fake_clock,
                                           clock_factory, sine_wave):
        service = PitchDetectionService(settings, timeline, clock=fake_clock,
                                        perf_clock=clock_factory(step=0.0))
        service.frame_source.start()

        events = service.on_audio_chunk(chunk_event(sine_wave(440.0, num_samples=6144)))

        assert len(events) == 3
        assert service.stats.frames_dropped == 0

    def test_process_frames_in_order(self, service, timeline, audio_test_data):
        frames = frames_from_buffer(audio_test_data("sine", 0.5, frequency=220.0), 44100)

        events = service.process_frames(frames)

        assert len(events) == len(timeline) == 18
        assert all(e.note_name == "A3" for e in events)

    def test_reset_clears_timeline_and_stats(self, service, timeline, sine_wave):
        service.process_frame(SampleFrame(samples=sine_wave(440.0), sample_rate=44100,
                                          start_time=0.0))

        service.reset()

        assert len(timeline) == 0
        assert service.stats.events_accepted == 0


@pytest.mark.unit
class TestBufferAnalysis:
    """Test cases for batch analysis of decoded buffers."""

    def test_analyze_buffer(self, service, timeline, audio_test_data):
        added = service.analyze_buffer(audio_test_data("sine", 1.0, frequency=440.0), 44100)

        assert added == 40
        assert len(timeline) == 40
        assert timeline[1].time == pytest.approx(1024 / 44100)
        assert {e.note_name for e in timeline} == {"A4"}

    def test_iter_analysis_yields_progress(self, service, audio_test_data):
        progress = list(service.iter_analysis(audio_test_data("sine", 1.0), 44100,
                                              chunk_frames=16))

        assert progress == [(16, 40), (32, 40), (40, 40)]

    def test_iter_analysis_empty_buffer(self, service):
        assert list(service.iter_analysis(np.zeros(100), 44100)) == [(0, 0)]

    def test_analyze_other_sample_rate(self, service, timeline, audio_test_data):
        samples = audio_test_data("sine", 1.0, sample_rate=22050, frequency=330.0)

        service.analyze_buffer(samples, 22050)

        assert len(timeline) > 0
        assert all(e.frequency == pytest.approx(330.0, rel=0.01) for e in timeline)

    def test_silence_produces_no_events(self, service, timeline, audio_test_data):
        service.analyze_buffer(audio_test_data("silence", 1.0), 44100)
        assert len(timeline) == 0
        assert service.stats.frames_unvoiced == 40

    def test_custom_band(self, timeline, audio_test_data):
        settings = PitchSettings(min_frequency=500.0, max_frequency=1000.0)
        service = PitchDetectionService(settings, timeline)

        service.analyze_buffer(audio_test_data("sine", 1.0, frequency=440.0), 44100)

        assert len(timeline) == 0
        assert service.stats.frames_out_of_band == 40
