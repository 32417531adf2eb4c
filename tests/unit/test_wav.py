"""Unit tests for WAV decoding."""

import pytest
import numpy as np
from pathlib import Path
from scipy.io import wavfile

from pitchroll.audio.wav import load_wav, to_float_samples


@pytest.mark.unit
class TestWav:
    """Test cases for WAV loading."""

    def test_load_int16(self, sample_wav_file):
        samples, sample_rate = load_wav(sample_wav_file)

        assert sample_rate == 44100
        assert samples.dtype == np.float64
        assert len(samples) == int(2.5 * 44100)
        assert np.max(np.abs(samples)) == pytest.approx(0.5, abs=1e-3)

    def test_stereo_uses_first_channel(self, temp_data_dir):
        left = np.full(100, 16384, dtype=np.int16)
        right = np.full(100, -32768, dtype=np.int16)
        path = Path(temp_data_dir) / "stereo.wav"
        wavfile.write(str(path), 8000, np.column_stack((left, right)))

        samples, sample_rate = load_wav(path)

        assert sample_rate == 8000
        assert samples.shape == (100,)
        np.testing.assert_allclose(samples, 0.5)

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            load_wav(Path(temp_data_dir) / "nope.wav")

    @pytest.mark.parametrize("data, expected", [
        (np.array([0, 128, 255], dtype=np.uint8), [-1.0, 0.0, 127 / 128]),
        (np.array([-32768, 0, 16384], dtype=np.int16), [-1.0, 0.0, 0.5]),
        (np.array([-2 ** 31, 2 ** 30], dtype=np.int32), [-1.0, 0.5]),
        (np.array([-0.25, 0.75], dtype=np.float32), [-0.25, 0.75]),
    ])
    def test_to_float_samples(self, data, expected):
        np.testing.assert_allclose(to_float_samples(data), expected)
