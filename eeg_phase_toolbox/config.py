"""
Config Module
-------------
PLV run configuration, loaded from a JSON file.
Any key left out of the file keeps its default below.
"""
import json
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional, Union

from .analyzers.sliding_window_analyzer import (
    DEFAULT_FIRST_START_MS,
    DEFAULT_LAST_START_MS,
    DEFAULT_STEP_MS,
    DEFAULT_WHOLE_WINDOW_MS,
    DEFAULT_WIDTH_MS,
    make_windows,
)
from .processors.filtering_processor import DEFAULT_FILTER_METHOD, FilterSpec

DEFAULT_BAND = [6.0, 10.0]
DEFAULT_ORDER = 300
DEFAULT_BOOTSTRAP_REPETITIONS = 100


@dataclass
class PLVConfig:
    roi: List[Union[str, int]] = field(default_factory=list)
    band: List[float] = field(default_factory=lambda: list(DEFAULT_BAND))
    order: int = DEFAULT_ORDER
    method: str = DEFAULT_FILTER_METHOD
    bootstrap_repetitions: int = DEFAULT_BOOTSTRAP_REPETITIONS
    window_first_start_ms: float = DEFAULT_FIRST_START_MS
    window_last_start_ms: float = DEFAULT_LAST_START_MS
    window_step_ms: float = DEFAULT_STEP_MS
    window_width_ms: float = DEFAULT_WIDTH_MS
    whole_window_ms: Optional[List[float]] = field(default_factory=lambda: list(DEFAULT_WHOLE_WINDOW_MS))
    max_response_ms: Optional[float] = None
    response_column: Optional[str] = None
    pair_mode: str = 'combinations'
    seeds: Optional[List[Union[str, int]]] = None
    random_seed: Optional[int] = None
    max_workers: int = 1
    log_level: str = 'INFO'

    def __post_init__(self):
        if len(self.band) != 2:
            raise ValueError(f"Config 'band' must hold two edges [low, high], got {self.band}.")
        if self.whole_window_ms is not None and len(self.whole_window_ms) != 2:
            raise ValueError(f"Config 'whole_window_ms' must be [start, stop] or null, got {self.whole_window_ms}.")

    def filter_spec(self) -> FilterSpec:
        return FilterSpec(low=float(self.band[0]), high=float(self.band[1]), order=self.order, method=self.method)

    def windows(self):
        return make_windows(self.window_first_start_ms, self.window_last_start_ms,
                            self.window_step_ms, self.window_width_ms)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def config_from_dict(values: Dict[str, Any]) -> PLVConfig:
    """Builds a PLVConfig, rejecting unknown keys."""
    known = {f.name for f in fields(PLVConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {unknown}. Known keys: {sorted(known)}")
    return PLVConfig(**values)


def load_config(path: str) -> PLVConfig:
    """Loads a PLVConfig from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        values = json.load(f)
    if not isinstance(values, dict):
        raise ValueError(f"Config file {path} must contain a JSON object.")
    return config_from_dict(values)
