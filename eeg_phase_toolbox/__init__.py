"""
eegPhaseToolbox
---------------
Phase-locking value estimation over epoched EEG, with trial bootstrap
confidence intervals and the behavioural/ERP summary helpers used alongside it.
"""
from .errors import (
    PLVError,
    InvalidFilterSpecError,
    InsufficientTrialsError,
    WindowTooShortError,
    DegenerateSignalWarning,
)
from .processors.filtering_processor import FilterSpec
from .analyzers.plv_analyzer import compute_plv, PLVAnalyzer, PLVResult

__version__ = '0.1.0'

__all__ = [
    'PLVError',
    'InvalidFilterSpecError',
    'InsufficientTrialsError',
    'WindowTooShortError',
    'DegenerateSignalWarning',
    'FilterSpec',
    'compute_plv',
    'PLVAnalyzer',
    'PLVResult',
]
