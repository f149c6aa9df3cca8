"""
PLV Analyzer Module
-------------------
Phase-locking value (PLV) across trials between channel pairs of band-limited
EEG epochs, with percentile-bootstrap confidence intervals over resampled trials.

    plv[t] = |mean_trials(exp(i * (phase_c1[t] - phase_c2[t])))|
"""
import logging
import warnings
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from ..errors import DegenerateSignalWarning, InsufficientTrialsError, PLVError, WindowTooShortError
from ..processors.channel_pair_processor import ChannelRef, build_channel_pairs, resolve_channels
from ..processors.epoch_processor import EpochedSignal
from ..processors.filtering_processor import FilterSpec, bandpass_zero_phase, validate_filter_spec
from ..processors.phase_processor import extract_phase, resultant_length
from ..processors.windowing_processor import plan_window, sample_times_ms

MIN_TRIALS = 2
CI_PERCENTILES = (2.5, 97.5)

RandomState = Union[None, int, np.random.SeedSequence, np.random.Generator]


class PLVResult(NamedTuple):
    """
    plv: (pair, sample) values in [0, 1].
    ci: (pair, sample, 2) lower/upper bounds, or None without bootstrap.
    times_ms: time of each returned sample.
    pairs: channel index pairs, in the order of the first axis.
    pair_labels: channel name pairs matching `pairs`.
    """
    plv: NDArray[np.float64]
    ci: Optional[NDArray[np.float64]]
    times_ms: NDArray[np.float64]
    pairs: List[Tuple[int, int]]
    pair_labels: List[Tuple[str, str]]


def _validate_inputs(epochs, sample_rate: float, filter_spec: FilterSpec, bootstrap_repetitions: int) -> NDArray[np.float64]:
    data = np.asarray(epochs, dtype=np.float64)
    if data.ndim != 3:
        raise ValueError(f"Epochs must be shaped (channel, sample, trial), got shape {data.shape}.")
    validate_filter_spec(filter_spec, sample_rate)
    _, n_samples, n_trials = data.shape
    if n_trials < MIN_TRIALS:
        raise InsufficientTrialsError(f"Phase locking across trials needs at least {MIN_TRIALS} trials, got {n_trials}.")
    min_samples = 2 * filter_spec.order + 1
    if n_samples < min_samples:
        raise WindowTooShortError(
            f"{n_samples} samples cannot survive trimming {filter_spec.order} transient samples "
            f"at each end; at least {min_samples} are needed."
        )
    if (not isinstance(bootstrap_repetitions, (int, np.integer)) or isinstance(bootstrap_repetitions, bool)
            or bootstrap_repetitions < 0):
        raise ValueError(f"Bootstrap repetitions must be a non-negative integer, got {bootstrap_repetitions!r}.")
    if not np.all(np.isfinite(data)):
        raise ValueError("Epochs contain non-finite values.")
    return data


def _check_pairs(pairs: Optional[Sequence[Tuple[int, int]]], n_channels: int) -> List[Tuple[int, int]]:
    if pairs is None:
        return build_channel_pairs(n_channels)
    checked = []
    for c1, c2 in pairs:
        if not (0 <= c1 < n_channels and 0 <= c2 < n_channels):
            raise IndexError(f"Channel pair ({c1}, {c2}) out of range for {n_channels} channels.")
        if c1 == c2:
            raise ValueError(f"Channel pair ({c1}, {c2}) pairs a channel with itself.")
        checked.append((int(c1), int(c2)))
    if not checked:
        raise ValueError("No channel pairs given.")
    return checked


def compute_plv(epochs: NDArray[np.float64], sample_rate: float, filter_spec: FilterSpec,
                bootstrap_repetitions: int = 0, pairs: Optional[Sequence[Tuple[int, int]]] = None,
                random_state: RandomState = None,
                logger: Optional[logging.Logger] = None) -> Tuple[NDArray[np.float64], Optional[NDArray[np.float64]]]:
    """
    Computes the phase-locking value across trials for every channel pair and sample.

    Args:
        epochs (np.ndarray): Signal shaped (channel, sample, trial). Not modified.
        sample_rate (float): Samples per second.
        filter_spec (FilterSpec): Band-pass applied forward and backward before phase extraction.
        bootstrap_repetitions (int): Trial resamples for the 95% percentile interval; 0 disables it.
        pairs (Optional[Sequence[Tuple[int, int]]]): Channel index pairs. Defaults to all unordered pairs.
        random_state: Seed or numpy Generator for the trial resampling.
        logger (Optional[logging.Logger]): Logger instance. If None, the module logger is used.

    Returns:
        tuple: (plv, ci)
               plv is shaped (pair, sample) with filter_spec.order samples removed
               from each end of the epoch.
               ci is shaped (pair, sample, 2) holding the 2.5th and 97.5th
               bootstrap percentiles, or None when bootstrap_repetitions is 0.

    Raises:
        InvalidFilterSpecError, InsufficientTrialsError, WindowTooShortError:
            before any computation, for invalid inputs.
    """
    logger = logger if logger else logging.getLogger(__name__)
    data = _validate_inputs(epochs, sample_rate, filter_spec, bootstrap_repetitions)
    n_channels, n_samples, n_trials = data.shape
    pairs = _check_pairs(pairs, n_channels)

    boot_note = f" (with 95% CIs from {bootstrap_repetitions} bootstraps)" if bootstrap_repetitions > 0 else ""
    logger.info(
        f"PLV - Calculating phase-locking value{boot_note}: {len(pairs)} pairs, "
        f"{n_samples} samples, {n_trials} trials, band {filter_spec.low}-{filter_spec.high} Hz, "
        f"order {filter_spec.order} ({filter_spec.method})."
    )

    filtered = bandpass_zero_phase(data, sample_rate, filter_spec, axis=1)
    phase, degenerate = extract_phase(filtered)
    keep = slice(filter_spec.order, n_samples - filter_spec.order)
    phase, degenerate = phase[:, keep, :], degenerate[:, keep, :]
    n_out = phase.shape[1]

    boot_trials = None
    if bootstrap_repetitions > 0:
        rng = np.random.default_rng(random_state)
        boot_trials = rng.integers(0, n_trials, size=(bootstrap_repetitions, n_trials))

    plv = np.zeros((len(pairs), n_out))
    ci = np.zeros((len(pairs), n_out, 2)) if boot_trials is not None else None
    n_degenerate = 0
    for p, (c1, c2) in enumerate(pairs):
        phasors = np.exp(1j * (phase[c1] - phase[c2]))
        bad = degenerate[c1] | degenerate[c2]
        n_degenerate += int(bad.any(axis=-1).sum())
        plv[p] = resultant_length(phasors, bad)
        if boot_trials is not None:
            boot = np.empty((len(boot_trials), n_out))
            for b, trials in enumerate(boot_trials):
                boot[b] = resultant_length(phasors[:, trials], bad[:, trials])
            ci[p] = np.percentile(boot, CI_PERCENTILES, axis=0).T

    if n_degenerate:
        message = (f"Instantaneous phase undefined (zero amplitude) at {n_degenerate} pair-samples; "
                   f"PLV set to 0 there.")
        logger.warning(f"PLV - {message}")
        warnings.warn(message, DegenerateSignalWarning, stacklevel=2)
    return plv, ci


class PLVAnalyzer:
    """
    Computes phase-locking values for epoched EEG.
    - compute_plv: whole epochs, transient samples trimmed from both ends.
    - compute_windowed_plv: a millisecond window of an EpochedSignal, with the
      calculation segment padded so the window itself is transient-free.
    """
    DEFAULT_PAIR_MODE = 'combinations'

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.logger.info("PLVAnalyzer initialized.")

    def compute_plv(self, epochs: NDArray[np.float64], sample_rate: float, filter_spec: FilterSpec,
                    bootstrap_repetitions: int = 0, pairs: Optional[Sequence[Tuple[int, int]]] = None,
                    random_state: RandomState = None) -> Tuple[NDArray[np.float64], Optional[NDArray[np.float64]]]:
        """Delegates to the module-level compute_plv, logging input errors before re-raising them."""
        try:
            return compute_plv(epochs, sample_rate, filter_spec, bootstrap_repetitions,
                               pairs=pairs, random_state=random_state, logger=self.logger)
        except (PLVError, ValueError) as e:
            self.logger.error(f"PLVAnalyzer - Invalid input for PLV: {e}")
            raise

    def compute_windowed_plv(self, signal: EpochedSignal, roi: Sequence[ChannelRef], window_ms: Tuple[float, float],
                             filter_spec: FilterSpec, bootstrap_repetitions: int = 0,
                             pair_mode: str = DEFAULT_PAIR_MODE, seeds: Optional[Sequence[ChannelRef]] = None,
                             random_state: RandomState = None) -> PLVResult:
        """
        Computes PLV for the closed interval `window_ms` of `signal`.

        Args:
            signal (EpochedSignal): Epochs with timebase and channel names.
            roi (Sequence[str | int]): Region-of-interest channels.
            window_ms (Tuple[float, float]): Closed interval to extract, in ms.
            filter_spec (FilterSpec): Band-pass specification.
            bootstrap_repetitions (int): Trial resamples; 0 disables intervals.
            pair_mode (str): 'combinations' or 'seed'.
            seeds (Optional[Sequence[str | int]]): Seed channels for 'seed' mode.
            random_state: Seed or numpy Generator for the trial resampling.

        Returns:
            PLVResult: Values, intervals and time axis of the returned window.
        """
        try:
            validate_filter_spec(filter_spec, signal.sample_rate)
            channels = resolve_channels(roi, signal.ch_names, signal.n_channels)
            seed_channels = resolve_channels(seeds, signal.ch_names, signal.n_channels, min_channels=1) if seeds else None
            pairs = build_channel_pairs(channels, pair_mode, seed_channels)
            plan = plan_window(window_ms[0], window_ms[1], signal.sample_rate, signal.tmin_ms,
                               signal.n_samples, filter_spec.order)
        except (PLVError, ValueError, KeyError, IndexError) as e:
            self.logger.error(f"PLVAnalyzer - Cannot set up PLV for '{signal.name}' window {window_ms}: {e}")
            raise

        times = sample_times_ms(signal.n_samples, signal.sample_rate, signal.tmin_ms)
        if plan.clipped:
            self.logger.warning(
                f"PLVAnalyzer - Window {window_ms} ms of '{signal.name}' clipped to "
                f"{times[plan.start]:.1f}..{times[plan.stop]:.1f} ms to exclude filter transients."
            )
        self.logger.info(
            f"PLVAnalyzer - '{signal.name}': calc segment {times[plan.segment_start]:.1f}..{times[plan.segment_stop]:.1f} ms "
            f"to extract {times[plan.start]:.1f}..{times[plan.stop]:.1f} ms."
        )

        used = sorted({c for pair in pairs for c in pair})
        position = {c: i for i, c in enumerate(used)}
        segment = signal.data[used, plan.segment_start:plan.segment_stop + 1, :]
        plv, ci = self.compute_plv(segment, signal.sample_rate, filter_spec, bootstrap_repetitions,
                                   pairs=[(position[c1], position[c2]) for c1, c2 in pairs],
                                   random_state=random_state)

        offset = plan.start - (plan.segment_start + filter_spec.order)
        extract = slice(offset, offset + plan.n_samples)
        return PLVResult(
            plv=plv[:, extract],
            ci=None if ci is None else ci[:, extract, :],
            times_ms=times[plan.start:plan.stop + 1],
            pairs=pairs,
            pair_labels=[(signal.ch_names[c1], signal.ch_names[c2]) for c1, c2 in pairs],
        )
