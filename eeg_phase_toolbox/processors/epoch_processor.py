"""
Epoch Processor Module
----------------------
Container for epoched signals and trial subsetting by response time.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

DEFAULT_MAX_RESPONSE_MS = 600.0


@dataclass(frozen=True)
class EpochedSignal:
    """
    Epoched EEG shaped (channel, sample, trial).

    Args:
        data (np.ndarray): Signal values.
        sample_rate (float): Samples per second.
        tmin_ms (float): Time of the first sample relative to the event, in ms.
        ch_names (List[str]): One name per channel.
        response_durations (Optional[np.ndarray]): Per-trial response time in ms.
        name (str): Label used in log messages.
    """
    data: NDArray[np.float64]
    sample_rate: float
    tmin_ms: float = 0.0
    ch_names: List[str] = field(default_factory=list)
    response_durations: Optional[NDArray[np.float64]] = None
    name: str = 'epochs'

    def __post_init__(self):
        if np.ndim(self.data) != 3:
            raise ValueError(f"Epoched data must be 3-D (channel, sample, trial), got shape {np.shape(self.data)}.")
        if not self.ch_names:
            object.__setattr__(self, 'ch_names', [str(i) for i in range(self.n_channels)])
        if len(self.ch_names) != self.n_channels:
            raise ValueError(f"{len(self.ch_names)} channel names given for {self.n_channels} channels.")
        if self.response_durations is not None and len(self.response_durations) != self.n_trials:
            raise ValueError(f"{len(self.response_durations)} response durations given for {self.n_trials} trials.")

    @property
    def n_channels(self) -> int:
        return self.data.shape[0]

    @property
    def n_samples(self) -> int:
        return self.data.shape[1]

    @property
    def n_trials(self) -> int:
        return self.data.shape[2]

    def select_trials(self, mask: NDArray[np.bool_], name: Optional[str] = None) -> 'EpochedSignal':
        """Returns a new EpochedSignal holding only the trials where `mask` is True."""
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (self.n_trials,):
            raise ValueError(f"Trial mask of shape {mask.shape} does not match {self.n_trials} trials.")
        durations = None if self.response_durations is None else np.asarray(self.response_durations)[mask]
        return EpochedSignal(
            data=self.data[:, :, mask],
            sample_rate=self.sample_rate,
            tmin_ms=self.tmin_ms,
            ch_names=list(self.ch_names),
            response_durations=durations,
            name=name if name else self.name,
        )


def exclude_long_responses(durations: NDArray[np.float64], max_duration_ms: float = DEFAULT_MAX_RESPONSE_MS) -> NDArray[np.bool_]:
    """Keep-mask dropping trials whose response duration exceeds `max_duration_ms`."""
    durations = np.asarray(durations, dtype=np.float64)
    return ~(durations > max_duration_ms)


def median_split(durations: NDArray[np.float64]) -> Tuple[NDArray[np.bool_], NDArray[np.bool_]]:
    """
    Splits trials at the median response time.
    Fast trials are strictly below the median; slow trials are the rest.
    NaN durations belong to neither subset.
    """
    durations = np.asarray(durations, dtype=np.float64)
    valid = ~np.isnan(durations)
    if not valid.any():
        return np.zeros(durations.shape, dtype=bool), np.zeros(durations.shape, dtype=bool)
    median = np.median(durations[valid])
    fast = valid & (durations < median)
    slow = valid & ~(durations < median)
    return fast, slow


class TrialSelector:
    """
    Builds the named trial subsets PLV is computed for: all trials and the
    fast/slow halves of a median response-time split.
    Every trial is kept unless `max_response_ms` is set, in which case trials
    with longer responses are dropped before the split
    (DEFAULT_MAX_RESPONSE_MS is the usual cut-off).
    """
    def __init__(self, logger: logging.Logger, max_response_ms: Optional[float] = None):
        self.logger = logger
        self.max_response_ms = max_response_ms
        self.logger.info("TrialSelector initialized.")

    def build_subsets(self, signal: EpochedSignal) -> Dict[str, EpochedSignal]:
        """
        Returns {'all': ...} and, when response durations are known,
        {'fast_rt': ..., 'slow_rt': ...} as well.
        """
        if signal.response_durations is None:
            self.logger.info(f"TrialSelector - No response durations for '{signal.name}'; using all {signal.n_trials} trials.")
            return {'all': signal}

        base = signal
        if self.max_response_ms is not None:
            keep = exclude_long_responses(signal.response_durations, self.max_response_ms)
            dropped = int((~keep).sum())
            if dropped:
                self.logger.info(f"TrialSelector - Excluding {dropped} trials with responses over {self.max_response_ms} ms.")
            base = signal.select_trials(keep)

        fast, slow = median_split(base.response_durations)
        self.logger.info(f"TrialSelector - Median RT split of '{signal.name}': {int(fast.sum())} fast, {int(slow.sum())} slow trials.")
        return {
            'all': base,
            'fast_rt': base.select_trials(fast, name=f"{signal.name}_fast_rt"),
            'slow_rt': base.select_trials(slow, name=f"{signal.name}_slow_rt"),
        }
