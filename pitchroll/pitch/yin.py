"""YIN fundamental-frequency estimation.

Implements the time-domain method of de Cheveigné & Kawahara (2002):

1. difference function ``d(tau) = sum_{i=0}^{N-tau-1} (x[i] - x[i+tau])**2``
   for lags up to N/2,
2. cumulative-mean-normalised difference ``d'(tau)`` with ``d'(0) = 1``,
3. absolute threshold: the first lag whose ``d'`` drops below the threshold,
   followed down to its local minimum,
4. parabolic interpolation around that minimum for a sub-sample lag.

Taking the first dip below the threshold, rather than the global minimum,
prefers the fundamental over its sub-harmonics.
"""

import logging
from typing import Optional

import numpy as np
from scipy import signal

from ..errors import InvalidFrameError
from ..models.audio import SampleFrame
from ..models.pitch import PitchEstimate, UNVOICED

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.1

# Relative floor below which difference values are treated as exact zeros.
# FFT round-off on constant or silent input would otherwise look periodic.
_NUMERIC_FLOOR = 1e-12


def difference_function(x: np.ndarray, max_lag: int) -> np.ndarray:
    """Compute d(tau) for tau in [0, max_lag].

    Uses ``(x[i] - x[i+tau])**2 = x[i]**2 + x[i+tau]**2 - 2*x[i]*x[i+tau]``,
    with the cross term from an FFT autocorrelation and the energy terms from
    cumulative sums, which is O(N log N) instead of O(N * max_lag).
    """
    n = x.shape[0]
    if not 0 < max_lag < n:
        raise ValueError(f"max_lag must be in (0, {n}), got {max_lag}")

    autocorr = signal.correlate(x, x, mode='full', method='fft')[n - 1:n + max_lag]
    energy = np.concatenate(([0.0], np.cumsum(x * x)))
    lags = np.arange(max_lag + 1)

    head = energy[n - lags]             # sum_{i=0}^{n-tau-1} x[i]**2
    tail = energy[n] - energy[lags]     # sum_{i=tau}^{n-1} x[i]**2
    diff = head + tail - 2.0 * autocorr

    floor = _NUMERIC_FLOOR * 2.0 * energy[n]
    diff[diff <= floor] = 0.0
    diff[0] = 0.0
    return diff


def cumulative_mean_normalized_difference(diff: np.ndarray) -> np.ndarray:
    """Compute d'(tau) = d(tau) / ((1/tau) * sum_{j=1}^{tau} d(j)), with d'(0) = 1.

    Where the running sum is zero (silence) d' is 1, so no lag can pass the
    threshold.
    """
    cmnd = np.ones_like(diff, dtype=np.float64)
    if diff.shape[0] < 2:
        return cmnd

    running = np.cumsum(diff[1:])
    lags = np.arange(1, diff.shape[0], dtype=np.float64)
    nonzero = running > 0
    cmnd[1:][nonzero] = diff[1:][nonzero] * lags[nonzero] / running[nonzero]
    return cmnd


def absolute_threshold(cmnd: np.ndarray, threshold: float) -> Optional[int]:
    """Return the first local minimum of cmnd below threshold, or None."""
    candidates = np.flatnonzero(cmnd[2:] < threshold)
    if candidates.size == 0:
        return None

    tau = int(candidates[0]) + 2
    last = cmnd.shape[0] - 1
    while tau < last and cmnd[tau + 1] < cmnd[tau]:
        tau += 1
    return tau


def parabolic_interpolation(cmnd: np.ndarray, tau: int) -> float:
    """Refine an integer lag using the parabola through its two neighbours."""
    x0 = tau - 1 if tau > 0 else tau
    x2 = tau + 1 if tau + 1 < cmnd.shape[0] else tau

    if x0 == tau:
        return float(tau if cmnd[tau] <= cmnd[x2] else x2)
    if x2 == tau:
        return float(tau if cmnd[tau] <= cmnd[x0] else x0)

    s0, s1, s2 = cmnd[x0], cmnd[tau], cmnd[x2]
    denominator = 2.0 * (2.0 * s1 - s2 - s0)
    if denominator == 0:
        return float(tau)
    return tau + (s2 - s0) / denominator


def yin_frequency(samples: np.ndarray,
                  sample_rate: int,
                  threshold: float = DEFAULT_THRESHOLD) -> Optional[float]:
    """Estimate the fundamental frequency of a frame in Hz, or None if unvoiced."""
    x = np.asarray(samples, dtype=np.float64)
    max_lag = x.shape[0] // 2
    if max_lag < 3:
        return None

    cmnd = cumulative_mean_normalized_difference(difference_function(x, max_lag))
    tau = absolute_threshold(cmnd, threshold)
    if tau is None:
        return None

    better_tau = parabolic_interpolation(cmnd, tau)
    if better_tau <= 0:
        return None
    return sample_rate / better_tau


class YinEstimator:
    """Per-frame YIN estimator bound to a frame length and sample rate."""

    def __init__(self,
                 sample_rate: int = 44100,
                 frame_length: int = 4096,
                 threshold: float = DEFAULT_THRESHOLD):
        if not 0 < threshold < 1:
            raise ValueError(f"threshold must be in (0, 1), got {threshold}")
        if frame_length < 6:
            raise ValueError(f"frame_length too short for YIN: {frame_length}")
        self.sample_rate = sample_rate
        self.frame_length = frame_length
        self.threshold = threshold

        logger.debug(f"YinEstimator: {sample_rate}Hz, N={frame_length}, threshold={threshold}, "
                     f"lowest detectable {self.min_detectable_frequency:.1f}Hz")

    @property
    def min_detectable_frequency(self) -> float:
        """Lowest frequency whose period fits in the lag search range."""
        return self.sample_rate / (self.frame_length // 2)

    def validate(self, frame: SampleFrame) -> None:
        if len(frame) != self.frame_length or frame.samples.ndim != 1:
            raise InvalidFrameError(
                f"Expected a frame of {self.frame_length} samples, got shape {frame.samples.shape}")
        if frame.sample_rate != self.sample_rate:
            raise InvalidFrameError(
                f"Frame sample rate {frame.sample_rate}Hz does not match estimator "
                f"sample rate {self.sample_rate}Hz")
        if not np.all(np.isfinite(frame.samples)):
            raise InvalidFrameError(f"Frame {frame.index} contains non-finite samples")

    def estimate(self, frame: SampleFrame) -> PitchEstimate:
        """Estimate one frame.

        Raises:
            InvalidFrameError: frame length or sample rate does not match
        """
        self.validate(frame)
        frequency = yin_frequency(frame.samples, self.sample_rate, self.threshold)
        if frequency is None:
            return UNVOICED
        return PitchEstimate.voiced(frequency)
