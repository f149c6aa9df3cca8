"""
Filtering Processor Module
--------------------------
Zero-phase band-pass filtering for phase analyses.
Filters are always applied forward and backward so no net phase shift is introduced.
"""
import numbers
from dataclasses import dataclass
from typing import Tuple, cast

import numpy as np
import scipy.signal
from numpy.typing import NDArray

from ..errors import InvalidFilterSpecError

FILTER_METHODS = ('fir', 'butter')
DEFAULT_FILTER_METHOD = 'fir'


@dataclass(frozen=True)
class FilterSpec:
    """
    Band-pass filter description.

    Args:
        low (float): Lower band edge in Hz.
        high (float): Upper band edge in Hz.
        order (int): Filter order. Also the number of samples trimmed from each
            end of the result as filter transient.
        method (str): 'fir' (order + 1 windowed-sinc taps) or 'butter'
            (Butterworth, second-order sections).
    """
    low: float
    high: float
    order: int
    method: str = DEFAULT_FILTER_METHOD

    @property
    def band(self) -> Tuple[float, float]:
        return (self.low, self.high)


def _is_real_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and np.isfinite(value)


def validate_filter_spec(spec: FilterSpec, sample_rate: float) -> None:
    """
    Raises InvalidFilterSpecError unless 0 < low < high < sample_rate / 2,
    order is a non-negative integer and the method is known.
    """
    if not isinstance(spec, FilterSpec):
        raise InvalidFilterSpecError(f"Expected a FilterSpec, got {type(spec).__name__}.")
    if not _is_real_number(sample_rate) or sample_rate <= 0:
        raise InvalidFilterSpecError(f"Sample rate must be a positive number, got {sample_rate!r}.")
    if not (_is_real_number(spec.low) and _is_real_number(spec.high)):
        raise InvalidFilterSpecError(f"Band edges must be finite numbers, got ({spec.low!r}, {spec.high!r}).")
    nyquist = sample_rate / 2.0
    if not (0 < spec.low < spec.high < nyquist):
        raise InvalidFilterSpecError(
            f"Band ({spec.low}, {spec.high}) Hz must satisfy 0 < low < high < {nyquist} Hz."
        )
    if not isinstance(spec.order, (int, np.integer)) or isinstance(spec.order, bool) or spec.order < 0:
        raise InvalidFilterSpecError(f"Filter order must be a non-negative integer, got {spec.order!r}.")
    if spec.method not in FILTER_METHODS:
        raise InvalidFilterSpecError(f"Unknown filter method '{spec.method}'. Use one of {FILTER_METHODS}.")
    if spec.method == 'butter' and spec.order < 1:
        raise InvalidFilterSpecError("Butterworth filters need an order of at least 1.")


def bandpass_zero_phase(data: NDArray[np.float64], sample_rate: float, spec: FilterSpec, axis: int = -1) -> NDArray[np.float64]:
    """
    Band-pass filters `data` along `axis` with a forward-backward (zero-lag) pass.

    Args:
        data (np.ndarray): Real-valued signal(s).
        sample_rate (float): Samples per second.
        spec (FilterSpec): Band, order and design method.
        axis (int): Time axis.

    Returns:
        np.ndarray: Filtered copy with the same shape as `data`.
    """
    validate_filter_spec(spec, sample_rate)
    sig = np.asarray(data, dtype=np.float64)
    n_samples = sig.shape[axis]
    if spec.method == 'fir':
        taps = scipy.signal.firwin(spec.order + 1, [spec.low, spec.high], pass_zero=False, fs=sample_rate)
        if len(taps) == 1:
            return sig * taps[0] ** 2
        padlen = min(3 * len(taps), n_samples - 1)
        return cast(NDArray[np.float64], scipy.signal.filtfilt(taps, 1.0, sig, axis=axis, padlen=padlen))
    sos = scipy.signal.butter(spec.order, [spec.low, spec.high], btype='band', fs=sample_rate, output='sos')
    padlen = min(3 * (2 * sos.shape[0] + 1), n_samples - 1)
    return cast(NDArray[np.float64], scipy.signal.sosfiltfilt(sos, sig, axis=axis, padlen=padlen))
