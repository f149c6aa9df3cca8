"""
Sliding Window Analyzer Module
------------------------------
Runs windowed PLV over a series of millisecond windows for several trial subsets.
Every (subset, window) task is independent and may run on a worker pool.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import InsufficientTrialsError
from ..processors.channel_pair_processor import ChannelRef
from ..processors.epoch_processor import EpochedSignal
from ..processors.filtering_processor import FilterSpec
from ..utils.parallel_runner import ParallelTaskRunner
from .plv_analyzer import MIN_TRIALS, PLVAnalyzer, PLVResult

DEFAULT_FIRST_START_MS = -200.0
DEFAULT_LAST_START_MS = 600.0
DEFAULT_STEP_MS = 100.0
DEFAULT_WIDTH_MS = 200.0
DEFAULT_WHOLE_WINDOW_MS = (-200.0, 800.0)

Window = Tuple[float, float]


def make_windows(first_start_ms: float = DEFAULT_FIRST_START_MS, last_start_ms: float = DEFAULT_LAST_START_MS,
                 step_ms: float = DEFAULT_STEP_MS, width_ms: float = DEFAULT_WIDTH_MS) -> List[Window]:
    """
    Windows (start, start + width) for start = first, first + step, ..., last (inclusive).
    """
    if step_ms <= 0 or width_ms <= 0:
        raise ValueError(f"Window step and width must be positive, got step={step_ms}, width={width_ms}.")
    n_windows = int(np.floor((last_start_ms - first_start_ms) / step_ms + 1e-9)) + 1
    if n_windows < 1:
        raise ValueError(f"Last window start {last_start_ms} precedes first start {first_start_ms}.")
    return [(first_start_ms + k * step_ms, first_start_ms + k * step_ms + width_ms) for k in range(n_windows)]


class SlidingWindowAnalyzer:
    """
    Computes PLV for every trial subset and window.
    - Results are keyed by (subset name, window).
    - Bootstrap seeds are spawned per task, so results do not depend on worker scheduling.
    - Subsets with fewer than two trials are skipped with a warning.
    """
    def __init__(self, logger: logging.Logger, max_workers: int = 1):
        self.logger = logger
        self.max_workers = max_workers
        self.plv_analyzer = PLVAnalyzer(logger)
        self.logger.info("SlidingWindowAnalyzer initialized.")

    def run(self, subsets: Dict[str, EpochedSignal], roi: Sequence[ChannelRef], windows: Sequence[Window],
            filter_spec: FilterSpec, bootstrap_repetitions: int = 0,
            include_whole: Optional[Window] = DEFAULT_WHOLE_WINDOW_MS,
            pair_mode: str = PLVAnalyzer.DEFAULT_PAIR_MODE, seeds: Optional[Sequence[ChannelRef]] = None,
            random_state: Optional[int] = None) -> Dict[Tuple[str, Window], PLVResult]:
        """
        Args:
            subsets (Dict[str, EpochedSignal]): Named trial subsets, e.g. from TrialSelector.
            roi (Sequence[str | int]): Region-of-interest channels.
            windows (Sequence[Tuple[float, float]]): Closed ms windows.
            filter_spec (FilterSpec): Band-pass specification.
            bootstrap_repetitions (int): Trial resamples per task; 0 disables intervals.
            include_whole (Optional[Tuple[float, float]]): Extra window appended to `windows`.
            pair_mode (str): 'combinations' or 'seed'.
            seeds (Optional[Sequence[str | int]]): Seed channels for 'seed' mode.
            random_state (Optional[int]): Root seed for bootstrap resampling.

        Returns:
            Dict[Tuple[str, Tuple[float, float]], PLVResult]
        """
        all_windows = [tuple(w) for w in windows]
        if include_whole is not None and tuple(include_whole) not in all_windows:
            all_windows.append(tuple(include_whole))

        usable = []
        for name, signal in subsets.items():
            if signal.n_trials < MIN_TRIALS:
                self.logger.warning(
                    f"SlidingWindowAnalyzer - Skipping subset '{name}': {signal.n_trials} trial(s), "
                    f"at least {MIN_TRIALS} needed for phase locking."
                )
                continue
            usable.append(name)
        if not usable:
            self.logger.error("SlidingWindowAnalyzer - No trial subset has enough trials for PLV.")
            counts = {name: signal.n_trials for name, signal in subsets.items()}
            raise InsufficientTrialsError(f"Every subset has fewer than {MIN_TRIALS} trials: {counts}.")

        keys = [(name, window) for name in usable for window in all_windows]
        child_seeds = np.random.SeedSequence(random_state).spawn(len(keys))
        task_configs: List[Dict[str, Any]] = [
            {
                'signal': subsets[name],
                'roi': roi,
                'window_ms': window,
                'filter_spec': filter_spec,
                'bootstrap_repetitions': bootstrap_repetitions,
                'pair_mode': pair_mode,
                'seeds': seeds,
                'random_state': child_seed,
            }
            for (name, window), child_seed in zip(keys, child_seeds)
        ]
        self.logger.info(
            f"SlidingWindowAnalyzer - {len(usable)} subsets x {len(all_windows)} windows = {len(keys)} PLV tasks."
        )
        runner = ParallelTaskRunner(self._run_task, task_configs, logger=self.logger, max_workers=self.max_workers)
        return dict(zip(keys, runner.run()))

    def _run_task(self, config: Dict[str, Any]) -> PLVResult:
        return self.plv_analyzer.compute_windowed_plv(**config)
