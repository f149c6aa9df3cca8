"""
PLV Reporter Module
-------------------
Writes PLV results to parquet in long format, one row per pair and sample.
"""
import logging
import os
from typing import Dict, Tuple

import numpy as np
import polars as pl

from ..analyzers.plv_analyzer import PLVResult

RESULT_COLUMNS = ['subset', 'window_start_ms', 'window_stop_ms', 'channel1', 'channel2',
                  'time_ms', 'plv', 'ci_lower', 'ci_upper']


def results_to_frame(results: Dict[Tuple[str, Tuple[float, float]], PLVResult]) -> pl.DataFrame:
    """Flattens {(subset, window): PLVResult} into a long polars DataFrame."""
    frames = []
    for (subset, (start_ms, stop_ms)), result in results.items():
        n_pairs, n_samples = result.plv.shape
        size = n_pairs * n_samples
        ch1 = [label[0] for label in result.pair_labels for _ in range(n_samples)]
        ch2 = [label[1] for label in result.pair_labels for _ in range(n_samples)]
        if result.ci is not None:
            lower, upper = result.ci[..., 0].ravel(), result.ci[..., 1].ravel()
        else:
            lower = upper = [None] * size
        frames.append(pl.DataFrame({
            'subset': [subset] * size,
            'window_start_ms': np.full(size, float(start_ms)),
            'window_stop_ms': np.full(size, float(stop_ms)),
            'channel1': ch1,
            'channel2': ch2,
            'time_ms': np.tile(result.times_ms, n_pairs),
            'plv': result.plv.ravel(),
            'ci_lower': pl.Series(lower, dtype=pl.Float64),
            'ci_upper': pl.Series(upper, dtype=pl.Float64),
        }))
    if not frames:
        return pl.DataFrame(schema={
            'subset': pl.Utf8, 'window_start_ms': pl.Float64, 'window_stop_ms': pl.Float64,
            'channel1': pl.Utf8, 'channel2': pl.Utf8, 'time_ms': pl.Float64, 'plv': pl.Float64,
            'ci_lower': pl.Float64, 'ci_upper': pl.Float64,
        })
    return pl.concat(frames).select(RESULT_COLUMNS)


class PLVReporter:
    """
    Saves sliding-window PLV results as one long-format parquet file per run
    (see results_to_frame for the column layout).
    """
    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.logger.info("PLVReporter initialized.")

    def save_results(self, results: Dict[Tuple[str, Tuple[float, float]], PLVResult], output_dir: str, filename: str) -> str:
        """
        Saves results as parquet and returns the written path.
        """
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, filename)
        frame = results_to_frame(results)
        frame.write_parquet(path)
        self.logger.info(f"PLVReporter: Saved {frame.height} PLV rows to {path}.")
        return path
