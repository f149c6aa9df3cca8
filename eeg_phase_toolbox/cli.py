"""
Command-line entry point: sliding-window PLV for one epochs file.

    eeg-plv <epochs.fif|epochs.npz> --config plv.json [--output-dir DIR] [--output-name NAME]
"""
import argparse
import os
import sys
from typing import List, Optional

from .analyzers.sliding_window_analyzer import SlidingWindowAnalyzer
from .config import PLVConfig, load_config
from .processors.epoch_processor import TrialSelector
from .readers.epochs_reader import EpochsReader
from .reporters.plv_reporter import PLVReporter
from .utils.logging_utils import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description='Phase-locking value with bootstrap CIs over sliding windows.')
    p.add_argument('epochs', help='Epochs file (.fif, .fif.gz or .npz)')
    p.add_argument('--config', help='JSON config file; defaults are used for missing keys')
    p.add_argument('--roi', nargs='+', help='ROI channels (names or indices); overrides the config')
    p.add_argument('--output-dir', default=os.getcwd(), help='Directory for the parquet output')
    p.add_argument('--output-name', default=None, help='Output file name (default: <input>_plv.parquet)')
    p.add_argument('--log-level', default=None, help='Overrides the config log level')
    return p


def _parse_roi(values: List[str]) -> List[object]:
    return [int(v) if v.lstrip('-').isdigit() else v for v in values]


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config) if args.config else PLVConfig()
    if args.roi:
        config.roi = _parse_roi(args.roi)
    logger = setup_logging(args.log_level or config.log_level)
    try:
        if not config.roi:
            raise ValueError("No ROI channels given; set 'roi' in the config or pass --roi.")
        signal = EpochsReader(logger).read(args.epochs, response_column=config.response_column)
        subsets = TrialSelector(logger, max_response_ms=config.max_response_ms).build_subsets(signal)
        results = SlidingWindowAnalyzer(logger, max_workers=config.max_workers).run(
            subsets, config.roi, config.windows(), config.filter_spec(),
            bootstrap_repetitions=config.bootstrap_repetitions,
            include_whole=tuple(config.whole_window_ms) if config.whole_window_ms else None,
            pair_mode=config.pair_mode, seeds=config.seeds, random_state=config.random_seed,
        )
        base = os.path.basename(args.epochs).split('.')[0]
        PLVReporter(logger).save_results(results, args.output_dir, args.output_name or f"{base}_plv.parquet")
    except Exception as e:
        logger.error(f"PLV analysis errored for input: {args.epochs}. Error: {e}", exc_info=True)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
