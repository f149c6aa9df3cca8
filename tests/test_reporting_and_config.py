import json

import numpy as np
import polars as pl
import pytest

from eeg_phase_toolbox.analyzers.plv_analyzer import PLVResult
from eeg_phase_toolbox.config import PLVConfig, config_from_dict, load_config
from eeg_phase_toolbox.processors.filtering_processor import FilterSpec
from eeg_phase_toolbox.reporters.plv_reporter import RESULT_COLUMNS, PLVReporter, results_to_frame


def _result(with_ci):
    plv = np.array([[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]])
    ci = np.stack([plv - 0.05, plv + 0.05], axis=-1) if with_ci else None
    return PLVResult(plv=plv, ci=ci, times_ms=np.array([0.0, 2.0, 4.0]), pairs=[(0, 1), (0, 2)],
                     pair_labels=[('Pz', 'Oz'), ('Pz', 'Fz')])


class TestPLVReporter:
    def test_long_format_layout(self):
        frame = results_to_frame({('all', (0.0, 4.0)): _result(with_ci=True)})
        assert frame.columns == RESULT_COLUMNS
        assert frame.height == 6
        second_pair = frame.filter(pl.col('channel2') == 'Fz')
        assert second_pair['plv'].to_list() == pytest.approx([0.4, 0.5, 0.6])
        assert second_pair['time_ms'].to_list() == [0.0, 2.0, 4.0]
        assert second_pair['ci_lower'].to_list() == pytest.approx([0.35, 0.45, 0.55])

    def test_missing_intervals_are_null(self):
        frame = results_to_frame({('fast_rt', (-200.0, 0.0)): _result(with_ci=False)})
        assert frame['ci_lower'].null_count() == 6
        assert frame['ci_upper'].null_count() == 6

    def test_empty_results_keep_schema(self):
        assert results_to_frame({}).columns == RESULT_COLUMNS

    def test_save_results_writes_parquet(self, logger, tmp_path):
        results = {('all', (0.0, 4.0)): _result(True), ('slow_rt', (0.0, 4.0)): _result(False)}
        path = PLVReporter(logger).save_results(results, str(tmp_path / 'out'), 'plv.parquet')
        frame = pl.read_parquet(path)
        assert frame.height == 12
        assert sorted(frame['subset'].unique().to_list()) == ['all', 'slow_rt']


class TestConfig:
    def test_defaults(self):
        config = PLVConfig()
        assert config.filter_spec() == FilterSpec(6.0, 10.0, 300, 'fir')
        assert config.bootstrap_repetitions == 100
        assert len(config.windows()) == 9
        assert config.max_response_ms is None

    def test_load_config_overrides(self, tmp_path):
        path = tmp_path / 'plv.json'
        path.write_text(json.dumps({'roi': ['Pz', 'Oz'], 'band': [4, 8], 'order': 40, 'method': 'butter',
                                    'random_seed': 3, 'whole_window_ms': None}))
        config = load_config(str(path))
        assert config.roi == ['Pz', 'Oz']
        assert config.filter_spec() == FilterSpec(4.0, 8.0, 40, 'butter')
        assert config.whole_window_ms is None
        assert config.to_dict()['random_seed'] == 3

    def test_unknown_key_raises(self):
        with pytest.raises(ValueError):
            config_from_dict({'bootstraps': 10})

    def test_bad_band_length_raises(self):
        with pytest.raises(ValueError):
            config_from_dict({'band': [6, 8, 10]})

    def test_non_object_file_raises(self, tmp_path):
        path = tmp_path / 'list.json'
        path.write_text('[1, 2]')
        with pytest.raises(ValueError):
            load_config(str(path))
