"""
Epochs Reader Module
--------------------
Reads epoched EEG into an EpochedSignal (channel, sample, trial).
Supports MNE .fif epochs files and .npz archives.
"""
import logging
import os
from typing import Optional

import mne
import numpy as np

from ..processors.epoch_processor import EpochedSignal

SUPPORTED_SUFFIXES = ('.fif', '.fif.gz', '.npz')


class EpochsReader:
    """
    Loads epoched EEG from disk.
    - .fif: mne.read_epochs; response durations from an epochs.metadata column.
    - .npz: keys 'data' (channel, sample, trial) and 'sample_rate'; optional
      'tmin_ms', 'ch_names', 'response_durations'.
    """
    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.logger.info("EpochsReader initialized.")

    def read(self, path: str, response_column: Optional[str] = None) -> EpochedSignal:
        """
        Args:
            path (str): File to read.
            response_column (Optional[str]): Metadata column with per-trial response time in ms (.fif only).

        Returns:
            EpochedSignal: Loaded epochs.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Epochs file not found: {path}")
        name = os.path.basename(path)
        if path.endswith('.npz'):
            signal = self._read_npz(path, name)
        elif path.endswith(('.fif', '.fif.gz')):
            signal = self._read_fif(path, name, response_column)
        else:
            raise ValueError(f"Unsupported epochs file '{path}'. Supported: {SUPPORTED_SUFFIXES}")
        self.logger.info(
            f"EpochsReader - Loaded '{name}': {signal.n_channels} channels, {signal.n_samples} samples, "
            f"{signal.n_trials} trials at {signal.sample_rate} Hz."
        )
        return signal

    def _read_npz(self, path: str, name: str) -> EpochedSignal:
        with np.load(path, allow_pickle=False) as archive:
            missing = [key for key in ('data', 'sample_rate') if key not in archive.files]
            if missing:
                raise KeyError(f"EpochsReader - '{name}' is missing keys {missing}.")
            durations = archive['response_durations'] if 'response_durations' in archive.files else None
            return EpochedSignal(
                data=np.asarray(archive['data'], dtype=np.float64),
                sample_rate=float(archive['sample_rate']),
                tmin_ms=float(archive['tmin_ms']) if 'tmin_ms' in archive.files else 0.0,
                ch_names=[str(ch) for ch in archive['ch_names']] if 'ch_names' in archive.files else [],
                response_durations=None if durations is None else np.asarray(durations, dtype=np.float64),
                name=name,
            )

    def _read_fif(self, path: str, name: str, response_column: Optional[str]) -> EpochedSignal:
        epochs = mne.read_epochs(path, preload=True, verbose=False)
        durations = None
        if response_column:
            if epochs.metadata is None or response_column not in epochs.metadata.columns:
                self.logger.warning(f"EpochsReader - Metadata column '{response_column}' not found in '{name}'; no RT subsets.")
            else:
                durations = epochs.metadata[response_column].to_numpy(dtype=np.float64)
        # MNE stores (trial, channel, sample).
        data = np.transpose(epochs.get_data(), (1, 2, 0))
        return EpochedSignal(
            data=data,
            sample_rate=float(epochs.info['sfreq']),
            tmin_ms=float(epochs.tmin) * 1000.0,
            ch_names=list(epochs.ch_names),
            response_durations=durations,
            name=name,
        )
