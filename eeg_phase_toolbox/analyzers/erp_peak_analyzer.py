"""
ERP Peak Analyzer Module
------------------------
Peak latency and amplitude of averaged ERPs within a time window.
"""
import logging
from typing import Dict, Hashable, Sequence, Tuple

import numpy as np
import pandas as pd
from numpy.typing import NDArray

PEAK_METHODS = ('max_abs', 'max', 'min')


def find_peak(erp: NDArray[np.float64], times_ms: NDArray[np.float64], window_ms: Tuple[float, float],
              method: str = 'max_abs') -> Tuple[float, float]:
    """
    Latency and amplitude of the peak of `erp` inside the closed window.

    Args:
        erp (np.ndarray): One channel's averaged waveform.
        times_ms (np.ndarray): Sample times in ms.
        window_ms (Tuple[float, float]): Search window in ms.
        method (str): 'max_abs' (largest magnitude), 'max' (most positive) or 'min' (most negative).

    Returns:
        tuple: (latency_ms, amplitude)
    """
    erp, times_ms = np.asarray(erp, dtype=np.float64), np.asarray(times_ms, dtype=np.float64)
    if erp.shape != times_ms.shape:
        raise ValueError(f"ERP shape {erp.shape} does not match time axis shape {times_ms.shape}.")
    if method not in PEAK_METHODS:
        raise ValueError(f"Unknown peak method '{method}'. Use one of {PEAK_METHODS}.")
    mask = (times_ms >= window_ms[0]) & (times_ms <= window_ms[1])
    if not mask.any():
        raise ValueError(f"Peak window {window_ms} ms contains no samples.")
    segment, seg_times = erp[mask], times_ms[mask]
    score = np.abs(segment) if method == 'max_abs' else segment if method == 'max' else -segment
    idx = int(np.argmax(score))
    return float(seg_times[idx]), float(segment[idx])


class ERPPeakAnalyzer:
    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.logger.info("ERPPeakAnalyzer initialized.")

    def summarize(self, erps: Dict[Tuple[Hashable, Hashable], NDArray[np.float64]], times_ms: NDArray[np.float64],
                  ch_names: Sequence[str], window_ms: Tuple[float, float], method: str = 'max_abs') -> pd.DataFrame:
        """
        Peak table for averaged ERPs.

        Args:
            erps (dict): {(subject, condition): array shaped (channel, sample)}.
            times_ms (np.ndarray): Sample times in ms.
            ch_names (Sequence[str]): Channel names, one per row of each ERP.
            window_ms (Tuple[float, float]): Search window in ms.
            method (str): Peak method, see find_peak.

        Returns:
            pd.DataFrame: Columns subject, condition, channel, latency_ms, amplitude.
        """
        self.logger.info(f"ERPPeakAnalyzer - Finding '{method}' peaks in {window_ms} ms for {len(erps)} ERPs.")
        rows = []
        for (subject, condition), erp in erps.items():
            erp = np.atleast_2d(erp)
            if erp.shape[0] != len(ch_names):
                raise ValueError(f"ERP for ({subject}, {condition}) has {erp.shape[0]} channels, expected {len(ch_names)}.")
            for ch_idx, ch_name in enumerate(ch_names):
                latency, amplitude = find_peak(erp[ch_idx], times_ms, window_ms, method)
                rows.append({'subject': subject, 'condition': condition, 'channel': ch_name,
                             'latency_ms': latency, 'amplitude': amplitude})
        return pd.DataFrame(rows, columns=['subject', 'condition', 'channel', 'latency_ms', 'amplitude'])
