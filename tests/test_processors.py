import numpy as np
import pytest

from eeg_phase_toolbox.errors import InvalidFilterSpecError, WindowTooShortError
from eeg_phase_toolbox.processors.channel_pair_processor import build_channel_pairs, resolve_channels
from eeg_phase_toolbox.processors.epoch_processor import (
    EpochedSignal,
    TrialSelector,
    exclude_long_responses,
    median_split,
)
from eeg_phase_toolbox.processors.filtering_processor import FilterSpec, bandpass_zero_phase, validate_filter_spec
from eeg_phase_toolbox.processors.phase_processor import extract_phase, resultant_length
from eeg_phase_toolbox.processors.windowing_processor import (
    ms_to_sample_range,
    plan_window,
    sample_times_ms,
)
from tests.helpers import SAMPLE_RATE, sinusoid


class TestFiltering:
    @pytest.mark.parametrize('spec', [FilterSpec(6.0, 10.0, 100), FilterSpec(6.0, 10.0, 3, method='butter')])
    def test_zero_phase_keeps_in_band_phase(self, spec):
        x = sinusoid(2000, 0.3)
        filtered = bandpass_zero_phase(x, SAMPLE_RATE, spec)
        # Away from the edges the filtered wave lines up with the input.
        core = slice(300, 1700)
        corr = np.corrcoef(x[core], filtered[core])[0, 1]
        assert corr > 0.999

    def test_out_of_band_component_is_attenuated(self):
        slow, fast = sinusoid(2000, freq=8.0), sinusoid(2000, freq=60.0)
        filtered = bandpass_zero_phase(slow + fast, SAMPLE_RATE, FilterSpec(6.0, 10.0, 200))
        core = slice(400, 1600)
        residual = filtered[core] - slow[core]
        assert np.std(residual) < 0.1 * np.std(fast[core])

    def test_filters_along_requested_axis(self):
        x = np.stack([sinusoid(600, p) for p in (0.0, 1.0, 2.0)], axis=1)  # (sample, trial)
        filtered = bandpass_zero_phase(x, SAMPLE_RATE, FilterSpec(6.0, 10.0, 50), axis=0)
        assert filtered.shape == x.shape
        np.testing.assert_allclose(filtered[:, 1], bandpass_zero_phase(x[:, 1], SAMPLE_RATE, FilterSpec(6.0, 10.0, 50)))

    def test_order_zero_fir_is_identity(self):
        x = sinusoid(50, 0.2)
        np.testing.assert_allclose(bandpass_zero_phase(x, SAMPLE_RATE, FilterSpec(6.0, 10.0, 0)), x)

    def test_validation_rejects_non_spec(self):
        with pytest.raises(InvalidFilterSpecError):
            validate_filter_spec((6.0, 10.0, 50), SAMPLE_RATE)

    def test_validation_rejects_nan_edges(self):
        with pytest.raises(InvalidFilterSpecError):
            validate_filter_spec(FilterSpec(float('nan'), 10.0, 5), SAMPLE_RATE)


class TestPhase:
    def test_phase_of_cosine_tracks_argument(self):
        n = 1000
        t = np.arange(n) / SAMPLE_RATE
        x = sinusoid(n, 0.5).reshape(1, n, 1)
        phase, degenerate = extract_phase(x)
        expected = np.angle(np.exp(1j * (2 * np.pi * 8.0 * t + 0.5)))
        wrapped = np.angle(np.exp(1j * (phase[0, 100:900, 0] - expected[100:900])))
        assert np.max(np.abs(wrapped)) < 1e-6
        assert not degenerate.any()

    def test_zero_channel_is_degenerate(self):
        x = np.zeros((2, 100, 3))
        x[0] = sinusoid(100).reshape(100, 1)
        _, degenerate = extract_phase(x)
        assert degenerate[1].all()
        assert not degenerate[0].all()

    def test_resultant_length_zeroes_degenerate_samples(self):
        phasors = np.ones((4, 3), dtype=complex)
        bad = np.zeros((4, 3), dtype=bool)
        bad[2, 1] = True
        np.testing.assert_array_equal(resultant_length(phasors, bad), [1.0, 1.0, 0.0, 1.0])


class TestWindowing:
    def test_sample_times(self):
        np.testing.assert_allclose(sample_times_ms(4, 500.0, -200.0), [-200.0, -198.0, -196.0, -194.0])

    @pytest.mark.parametrize('start_ms, stop_ms, expected', [
        (-100.0, 100.0, (50, 150)),
        (-99.0, 99.0, (51, 149)),
        (-300.0, 0.0, (0, 100)),
        (700.0, 5000.0, (450, 499)),
    ])
    def test_ms_to_sample_range(self, start_ms, stop_ms, expected):
        assert ms_to_sample_range(start_ms, stop_ms, 500.0, -200.0, 500) == expected

    def test_float_noise_does_not_shift_index(self):
        # 0.1 + 0.2 ms at 10 kHz is exactly sample 3 after rounding.
        assert ms_to_sample_range(0.1 + 0.2, 0.1 + 0.2, 10000.0, 0.0, 10) == (3, 3)

    @pytest.mark.parametrize('start_ms, stop_ms', [(100.0, 50.0), (900.0, 1000.0), (-101.0, -100.5)])
    def test_empty_window_raises(self, start_ms, stop_ms):
        with pytest.raises(WindowTooShortError):
            ms_to_sample_range(start_ms, stop_ms, 500.0, -100.0, 500)

    def test_plan_pads_by_order(self):
        plan = plan_window(0.0, 200.0, 500.0, -200.0, 500, 50)
        assert (plan.segment_start, plan.segment_stop) == (50, 250)
        assert (plan.start, plan.stop) == (100, 200)
        assert not plan.clipped
        assert plan.n_samples == 101

    def test_plan_clips_at_epoch_edges(self):
        plan = plan_window(-200.0, 798.0, 500.0, -200.0, 500, 50)
        assert (plan.segment_start, plan.segment_stop) == (0, 499)
        assert (plan.start, plan.stop) == (50, 449)
        assert plan.clipped

    def test_plan_without_transient_free_samples_raises(self):
        with pytest.raises(WindowTooShortError):
            plan_window(-200.0, -190.0, 500.0, -200.0, 500, 300)


class TestChannelPairs:
    def test_combinations(self):
        assert build_channel_pairs([0, 3, 5]) == [(0, 3), (0, 5), (3, 5)]
        assert build_channel_pairs(3) == [(0, 1), (0, 2), (1, 2)]

    def test_seed_mode_deduplicates(self):
        assert build_channel_pairs([0, 1, 2], mode='seed', seeds=[0, 1]) == [(0, 1), (0, 2), (1, 2)]

    def test_seed_mode_needs_seeds(self):
        with pytest.raises(ValueError):
            build_channel_pairs([0, 1], mode='seed')

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError):
            build_channel_pairs([0, 1], mode='matrix')

    def test_resolve_mixes_names_and_indices(self):
        assert resolve_channels(['Fz', 0, 'Oz', 0], ['Pz', 'Oz', 'Fz']) == [0, 1, 2]

    def test_resolve_rejects_bad_references(self):
        with pytest.raises(KeyError):
            resolve_channels(['Cz', 'Pz'], ['Pz', 'Oz'])
        with pytest.raises(IndexError):
            resolve_channels([0, 5], n_channels=3)
        with pytest.raises(ValueError):
            resolve_channels(['Pz', 'Pz'], ['Pz', 'Oz'])


class TestTrialSelection:
    def test_exclude_long_responses(self):
        np.testing.assert_array_equal(exclude_long_responses([500.0, 600.0, 601.0, np.nan]), [True, True, False, True])

    def test_median_split(self):
        fast, slow = median_split([300.0, 400.0, 500.0, 600.0, np.nan])
        np.testing.assert_array_equal(fast, [True, True, False, False, False])
        np.testing.assert_array_equal(slow, [False, False, True, True, False])

    def test_select_trials_copies_matching_trials(self, locked_signal):
        mask = np.zeros(locked_signal.n_trials, dtype=bool)
        mask[[1, 4]] = True
        subset = locked_signal.select_trials(mask, name='two')
        assert subset.n_trials == 2
        assert subset.name == 'two'
        np.testing.assert_array_equal(subset.data, locked_signal.data[:, :, [1, 4]])
        np.testing.assert_array_equal(subset.response_durations, [450.0, 700.0])

    def test_trial_selector_excludes_long_responses_when_asked(self, logger, locked_signal):
        subsets = TrialSelector(logger, max_response_ms=600.0).build_subsets(locked_signal)
        assert set(subsets) == {'all', 'fast_rt', 'slow_rt'}
        # 610 and 700 ms responses are excluded.
        assert subsets['all'].n_trials == 10
        assert subsets['fast_rt'].n_trials + subsets['slow_rt'].n_trials == 10
        assert subsets['fast_rt'].response_durations.max() < subsets['slow_rt'].response_durations.min()

    def test_trial_selector_keeps_long_responses_by_default(self, logger, locked_signal):
        subsets = TrialSelector(logger).build_subsets(locked_signal)
        assert subsets['all'].n_trials == 12
        assert (subsets['fast_rt'].n_trials, subsets['slow_rt'].n_trials) == (6, 6)
        assert 700.0 in subsets['slow_rt'].response_durations

    def test_trial_selector_without_durations(self, logger):
        signal = EpochedSignal(data=np.zeros((2, 10, 3)), sample_rate=100.0)
        assert list(TrialSelector(logger).build_subsets(signal)) == ['all']
        assert signal.ch_names == ['0', '1']

    def test_epoched_signal_checks_shapes(self):
        with pytest.raises(ValueError):
            EpochedSignal(data=np.zeros((2, 10)), sample_rate=100.0)
        with pytest.raises(ValueError):
            EpochedSignal(data=np.zeros((2, 10, 3)), sample_rate=100.0, ch_names=['a'])
        with pytest.raises(ValueError):
            EpochedSignal(data=np.zeros((2, 10, 3)), sample_rate=100.0, response_durations=np.zeros(2))
