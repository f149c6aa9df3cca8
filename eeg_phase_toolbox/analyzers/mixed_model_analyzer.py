"""
Mixed Model Analyzer Module
---------------------------
Mixed-effects fits on subject-level summary tables: linear mixed models,
binomial mixed GLMs for error data and a cluster percentile bootstrap of
fixed-effect coefficients.
"""
import logging
import warnings
from typing import Union

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from statsmodels.genmod.bayes_mixed_glm import BinomialBayesMixedGLM
from statsmodels.tools.sm_exceptions import ConvergenceWarning

CI_PERCENTILES = (2.5, 97.5)


class MixedModelAnalyzer:
    DEFAULT_N_BOOT = 1000

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.logger.info("MixedModelAnalyzer initialized.")

    def _check_columns(self, df: pd.DataFrame, group: str) -> pd.DataFrame:
        if group not in df.columns:
            self.logger.error(f"MixedModelAnalyzer - Grouping column '{group}' not found.")
            raise KeyError(f"Grouping column '{group}' not found.")
        if df[group].nunique() < 2:
            raise ValueError(f"Mixed models need at least two levels of '{group}'.")
        return df.reset_index(drop=True)

    def fit_lmm(self, df: pd.DataFrame, formula: str, group: str, reml: bool = True):
        """
        Fits a linear mixed model with a random intercept per `group`.

        Args:
            df (pd.DataFrame): Long-format data.
            formula (str): Patsy formula for the fixed effects, e.g. 'tau ~ condition'.
            group (str): Grouping column (usually the subject identifier).
            reml (bool): Fit by REML (True) or ML.
        Returns:
            MixedLMResults: The fitted model.
        """
        data = self._check_columns(df, group)
        self.logger.info(f"MixedModelAnalyzer - Fitting LMM '{formula}' with random intercept per '{group}' ({len(data)} rows).")
        return smf.mixedlm(formula, data, groups=data[group]).fit(reml=reml)

    def fit_logistic_mixed(self, df: pd.DataFrame, formula: str, group: str):
        """
        Fits a binomial (logit) mixed GLM with a random intercept per `group`,
        using variational Bayes. The outcome must be coded 0/1.
        """
        data = self._check_columns(df, group)
        self.logger.info(f"MixedModelAnalyzer - Fitting logistic mixed model '{formula}' with random intercept per '{group}'.")
        model = BinomialBayesMixedGLM.from_formula(formula, {group: f'0 + C({group})'}, data)
        return model.fit_vb()

    def bootstrap_fixed_effects(self, df: pd.DataFrame, formula: str, group: str, n_boot: int = DEFAULT_N_BOOT,
                                random_state: Union[None, int, np.random.Generator] = None) -> pd.DataFrame:
        """
        Percentile bootstrap of LMM fixed effects, resampling whole groups with replacement.

        Returns:
            pd.DataFrame: Indexed by term, columns estimate, ci_lower, ci_upper, n_boot.
                          n_boot counts the resamples whose refit succeeded.
        """
        data = self._check_columns(df, group)
        fit = self.fit_lmm(data, formula, group)
        rng = np.random.default_rng(random_state)
        levels = data[group].unique()
        by_level = {level: data[data[group] == level] for level in levels}

        self.logger.info(f"MixedModelAnalyzer - Bootstrapping fixed effects: {n_boot} resamples of {len(levels)} '{group}' levels.")
        estimates = []
        for b in range(n_boot):
            drawn = rng.choice(levels, size=len(levels), replace=True)
            # Repeated draws become distinct clusters.
            sample = pd.concat(
                [by_level[level].assign(**{group: f"{level}_{k}"}) for k, level in enumerate(drawn)],
                ignore_index=True,
            )
            try:
                with warnings.catch_warnings():
                    warnings.simplefilter('ignore', ConvergenceWarning)
                    boot_fit = smf.mixedlm(formula, sample, groups=sample[group]).fit(reml=True)
            except (np.linalg.LinAlgError, ValueError) as e:
                self.logger.warning(f"MixedModelAnalyzer - Bootstrap refit {b} failed: {e}")
                continue
            estimates.append(boot_fit.fe_params)

        if not estimates:
            self.logger.error("MixedModelAnalyzer - Every bootstrap refit failed.")
            raise RuntimeError("Every bootstrap refit failed.")
        boot = pd.DataFrame(estimates)
        lower, upper = np.percentile(boot.to_numpy(), CI_PERCENTILES, axis=0)
        return pd.DataFrame({
            'estimate': fit.fe_params,
            'ci_lower': pd.Series(lower, index=boot.columns),
            'ci_upper': pd.Series(upper, index=boot.columns),
            'n_boot': len(estimates),
        })

    def fixed_effects_table(self, fit) -> pd.DataFrame:
        """Coefficient, standard error, z and p for each fixed effect of an LMM fit."""
        names = fit.fe_params.index
        return pd.DataFrame({
            'estimate': fit.fe_params,
            'std_err': fit.bse_fe,
            'z': fit.tvalues[names],
            'p_value': fit.pvalues[names],
        })
