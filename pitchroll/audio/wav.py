"""Decoding of WAV files into float sample buffers for batch analysis."""

import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from scipy.io import wavfile

logger = logging.getLogger(__name__)


def to_float_samples(data: np.ndarray) -> np.ndarray:
    """Convert PCM data of any wavfile dtype to float64 in [-1, 1].

    Multi-channel data is reduced to its first channel.
    """
    if data.ndim > 1:
        data = data[:, 0]

    if data.dtype == np.uint8:
        return (data.astype(np.float64) - 128.0) / 128.0
    if np.issubdtype(data.dtype, np.integer):
        return data.astype(np.float64) / float(np.iinfo(data.dtype).max + 1)
    return data.astype(np.float64)


def load_wav(path: Union[str, Path]) -> Tuple[np.ndarray, int]:
    """Read a WAV file.

    Args:
        path: Path to the WAV file

    Returns:
        Tuple of (float64 mono samples, sample rate in Hz)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")

    sample_rate, data = wavfile.read(str(path))
    samples = to_float_samples(data)
    logger.info(f"Loaded {path.name}: {samples.shape[0]} samples at {sample_rate}Hz "
                f"({samples.shape[0] / sample_rate:.2f}s)")
    return samples, int(sample_rate)
