"""
Windowing Processor Module
--------------------------
Maps closed millisecond intervals to sample indices and plans the padded
calculation segment needed to keep filter transients out of a window.

Index rules, for time of sample 0 `tmin_ms`:
    start = ceil((start_ms - tmin_ms) * sample_rate / 1000)
    stop  = floor((stop_ms - tmin_ms) * sample_rate / 1000)   (inclusive)
"""
import math
from typing import NamedTuple, Tuple

import numpy as np
from numpy.typing import NDArray

from ..errors import WindowTooShortError

# Sample positions are rounded to this many decimals before ceil/floor.
INDEX_ROUNDING_DECIMALS = 9


class WindowPlan(NamedTuple):
    """Inclusive sample indices into the epoch."""
    segment_start: int
    segment_stop: int
    start: int
    stop: int
    requested_start: int
    requested_stop: int

    @property
    def clipped(self) -> bool:
        return (self.start, self.stop) != (self.requested_start, self.requested_stop)

    @property
    def n_samples(self) -> int:
        return self.stop - self.start + 1


def sample_times_ms(n_samples: int, sample_rate: float, tmin_ms: float = 0.0) -> NDArray[np.float64]:
    """Time of every sample in milliseconds."""
    return tmin_ms + np.arange(n_samples) * (1000.0 / sample_rate)


def ms_to_sample_range(start_ms: float, stop_ms: float, sample_rate: float, tmin_ms: float, n_samples: int) -> Tuple[int, int]:
    """
    Inclusive (start, stop) sample indices of the closed interval [start_ms, stop_ms],
    clipped to the epoch.

    Raises:
        WindowTooShortError: if the interval is reversed or contains no sample of the epoch.
    """
    if stop_ms < start_ms:
        raise WindowTooShortError(f"Window [{start_ms}, {stop_ms}] ms ends before it starts.")
    scale = sample_rate / 1000.0
    start = math.ceil(round((start_ms - tmin_ms) * scale, INDEX_ROUNDING_DECIMALS))
    stop = math.floor(round((stop_ms - tmin_ms) * scale, INDEX_ROUNDING_DECIMALS))
    start, stop = max(start, 0), min(stop, n_samples - 1)
    if start > stop:
        raise WindowTooShortError(
            f"Window [{start_ms}, {stop_ms}] ms contains no samples of the epoch "
            f"({n_samples} samples at {sample_rate} Hz from {tmin_ms} ms)."
        )
    return start, stop


def plan_window(start_ms: float, stop_ms: float, sample_rate: float, tmin_ms: float, n_samples: int, order: int) -> WindowPlan:
    """
    Pads the requested window by `order` samples on each side (clipped to the epoch)
    and intersects the request with the part of that segment that is free of
    filter transients.

    Raises:
        WindowTooShortError: if no transient-free sample of the request remains.
    """
    req_start, req_stop = ms_to_sample_range(start_ms, stop_ms, sample_rate, tmin_ms, n_samples)
    seg_start = max(req_start - order, 0)
    seg_stop = min(req_stop + order, n_samples - 1)
    start = max(req_start, seg_start + order)
    stop = min(req_stop, seg_stop - order)
    if start > stop:
        raise WindowTooShortError(
            f"Window [{start_ms}, {stop_ms}] ms has no samples left after trimming "
            f"{order} transient samples at each end of the {n_samples}-sample epoch."
        )
    return WindowPlan(seg_start, seg_stop, start, stop, req_start, req_stop)
