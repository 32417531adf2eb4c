"""Pytest configuration and fixtures for PitchRoll tests."""

import os
import pytest
import tempfile
import logging
from pathlib import Path
from unittest.mock import Mock, patch

import numpy as np
from scipy.io import wavfile

from pitchroll.config import PitchSettings


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
FRAME_LENGTH = 4096


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without audio hardware")
    config.addinivalue_line("markers", "integration: end-to-end pipeline tests")
    config.addinivalue_line("markers", "hardware: needs a real microphone")
    config.addinivalue_line("markers", "slow: takes more than a second")


def pytest_collection_modifyitems(config, items):
    if os.environ.get("PITCHROLL_HARDWARE_TESTS") == "1":
        return
    skip_hardware = pytest.mark.skip(reason="set PITCHROLL_HARDWARE_TESTS=1 to run hardware tests")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


def make_sine(frequency, num_samples=FRAME_LENGTH, sample_rate=SAMPLE_RATE, amplitude=0.5):
    t = np.arange(num_samples) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sine_wave():
    """Factory for sine wave sample buffers."""
    return make_sine


@pytest.fixture
def audio_test_data():
    """Generate various audio test data patterns."""
    def generate_audio(pattern="sine", duration_seconds=1.0, sample_rate=SAMPLE_RATE,
                       frequency=440.0):
        """Generate float samples for testing.

        Args:
            pattern: Type of audio pattern ('sine', 'noise', 'silence')
            duration_seconds: Duration of audio
            sample_rate: Sample rate in Hz
            frequency: Sine frequency in Hz

        Returns:
            np.ndarray of float64 samples in [-1, 1]
        """
        samples = int(duration_seconds * sample_rate)

        if pattern == "sine":
            return make_sine(frequency, samples, sample_rate)
        elif pattern == "noise":
            rng = np.random.default_rng(1234)
            return rng.uniform(-0.5, 0.5, samples)
        elif pattern == "silence":
            return np.zeros(samples)
        else:
            raise ValueError(f"Unknown pattern: {pattern}")

    return generate_audio


@pytest.fixture
def settings():
    """Default detection settings."""
    return PitchSettings()


@pytest.fixture
def sample_wav_file(temp_data_dir):
    """Write a WAV file: 1s of A4, 0.5s of silence, 1s of E5, as 16-bit PCM."""
    a4 = make_sine(440.0, SAMPLE_RATE)
    gap = np.zeros(SAMPLE_RATE // 2)
    e5 = make_sine(659.26, SAMPLE_RATE)
    data = (np.concatenate((a4, gap, e5)) * 32767).astype(np.int16)

    file_path = Path(temp_data_dir) / "test_audio.wav"
    wavfile.write(str(file_path), SAMPLE_RATE, data)
    return str(file_path)


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    pytest.importorskip("pyaudio")
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream: one chunk of float32 silence
        mock_stream.read.return_value = np.zeros(1024, dtype=np.float32).tobytes()
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        # Configure mock PyAudio class
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


class FakeClock:
    """Manually advanced clock for deterministic timing tests."""

    def __init__(self, start=0.0, step=0.0):
        self.now = start
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def clock_factory():
    """Build FakeClocks with a custom start and per-call step."""
    return FakeClock
