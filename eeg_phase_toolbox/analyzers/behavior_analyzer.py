"""
Behavior Analyzer Module
------------------------
Subject-level reaction-time summaries: ex-Gaussian parameters of correct-trial
RTs and error rates per subject and condition.
"""
import logging
from typing import Dict, Iterable

import numpy as np
import pandas as pd
from scipy import stats

MIN_RTS_FOR_FIT = 3
# Skewness of an ex-Gaussian lies in (0, 2); keep the moment guess inside it.
_SKEW_BOUNDS = (0.05, 1.9)


def _moment_start(rts: np.ndarray):
    """Method-of-moments start values (K, loc, scale) for scipy's exponnorm."""
    mean, sd = rts.mean(), rts.std(ddof=1)
    skew = float(np.clip(stats.skew(rts), *_SKEW_BOUNDS))
    tau = sd * (skew / 2.0) ** (1.0 / 3.0)
    sigma = np.sqrt(max(sd ** 2 - tau ** 2, (0.1 * sd) ** 2))
    return tau / sigma, mean - tau, sigma


class BehaviorAnalyzer:
    DEFAULT_SUBJECT_COL = 'subject'
    DEFAULT_CONDITION_COL = 'condition'
    DEFAULT_RT_COL = 'rt'
    DEFAULT_CORRECT_COL = 'correct'

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.logger.info("BehaviorAnalyzer initialized.")

    def fit_ex_gaussian(self, rts: Iterable[float]) -> Dict[str, float]:
        """
        Maximum-likelihood ex-Gaussian fit.

        Args:
            rts (Iterable[float]): Reaction times.
        Returns:
            dict: {'mu', 'sigma', 'tau'} in the units of `rts`; NaNs when fewer
                  than MIN_RTS_FOR_FIT finite values are available.
        """
        values = np.asarray(list(rts), dtype=np.float64)
        values = values[np.isfinite(values)]
        if values.size < MIN_RTS_FOR_FIT:
            self.logger.warning(f"BehaviorAnalyzer - Only {values.size} finite RTs; ex-Gaussian fit skipped.")
            return {'mu': np.nan, 'sigma': np.nan, 'tau': np.nan}
        k0, loc0, scale0 = _moment_start(values)
        k, loc, scale = stats.exponnorm.fit(values, k0, loc=loc0, scale=scale0)
        return {'mu': float(loc), 'sigma': float(scale), 'tau': float(k * scale)}

    def summarize(self, trials_df: pd.DataFrame, subject_col: str = DEFAULT_SUBJECT_COL,
                  condition_col: str = DEFAULT_CONDITION_COL, rt_col: str = DEFAULT_RT_COL,
                  correct_col: str = DEFAULT_CORRECT_COL) -> pd.DataFrame:
        """
        One row per subject x condition with n_trials, error_rate and the
        ex-Gaussian parameters of correct-trial RTs.
        """
        required_cols = [subject_col, condition_col, rt_col, correct_col]
        missing_cols = [col for col in required_cols if col not in trials_df.columns]
        if missing_cols:
            self.logger.error(f"BehaviorAnalyzer - Missing columns for RT summary: {missing_cols}")
            raise KeyError(f"Missing columns: {missing_cols}")

        self.logger.info(f"BehaviorAnalyzer - Summarizing {len(trials_df)} trials by '{subject_col}' x '{condition_col}'.")
        rows = []
        for (subject, condition), group in trials_df.groupby([subject_col, condition_col], sort=True):
            correct = group[correct_col].astype(bool)
            params = self.fit_ex_gaussian(group.loc[correct, rt_col])
            rows.append({
                subject_col: subject,
                condition_col: condition,
                'n_trials': int(len(group)),
                'error_rate': float(1.0 - correct.mean()),
                **params,
            })
        return pd.DataFrame(rows)
