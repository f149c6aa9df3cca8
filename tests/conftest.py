import logging

import numpy as np
import pytest

from eeg_phase_toolbox.processors.epoch_processor import EpochedSignal
from eeg_phase_toolbox.processors.filtering_processor import FilterSpec
from tests.helpers import SAMPLE_RATE, locked_epochs


@pytest.fixture
def logger():
    return logging.getLogger('eeg_phase_toolbox.tests')


@pytest.fixture
def theta_spec():
    return FilterSpec(low=6.0, high=10.0, order=50)


@pytest.fixture
def locked_signal():
    """Three identical channels, 500 Hz, epoch from -200 ms, 500 samples, 12 trials with RTs."""
    data = locked_epochs(3, 500, 12, seed=3)
    durations = np.array([320, 450, 610, 380, 700, 290, 510, 440, 360, 480, 300, 550], dtype=float)
    return EpochedSignal(data=data, sample_rate=SAMPLE_RATE, tmin_ms=-200.0,
                         ch_names=['Pz', 'Oz', 'Fz'], response_durations=durations, name='locked')
