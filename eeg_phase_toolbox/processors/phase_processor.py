"""
Phase Processor Module
----------------------
Instantaneous phase from the analytic (Hilbert) signal of band-limited epochs.
"""
from typing import Tuple

import numpy as np
from numpy.typing import NDArray
from scipy.signal import hilbert

# Amplitudes at or below this fraction of a channel's peak amplitude have no usable phase.
DEGENERATE_AMPLITUDE_RATIO = np.finfo(np.float64).eps


def extract_phase(filtered: NDArray[np.float64]) -> Tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """
    Computes instantaneous phase per channel, sample and trial.

    Args:
        filtered (np.ndarray): Band-passed epochs shaped (channel, sample, trial).

    Returns:
        tuple: (phase, degenerate)
               phase is the angle of the analytic signal in radians.
               degenerate is a boolean array marking samples whose analytic
               amplitude is zero relative to the channel's peak amplitude
               (every sample of an all-zero channel is degenerate).
    """
    analytic = hilbert(filtered, axis=1)
    amplitude = np.abs(analytic)
    peak = amplitude.max(axis=(1, 2), keepdims=True)
    degenerate = amplitude <= DEGENERATE_AMPLITUDE_RATIO * peak
    return np.angle(analytic), degenerate


def resultant_length(phasors: NDArray[np.complex128], degenerate: NDArray[np.bool_]) -> NDArray[np.float64]:
    """
    Length of the mean unit vector over the last (trial) axis.
    Samples where any trial is degenerate are set to 0.
    """
    length = np.abs(phasors.mean(axis=-1))
    length[degenerate.any(axis=-1)] = 0.0
    return np.minimum(length, 1.0)
