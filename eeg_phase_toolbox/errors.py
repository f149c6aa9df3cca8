"""
Errors Module
-------------
Exception and warning types raised by the PLV toolbox.
All structural errors are raised before any computation starts.
"""


class PLVError(Exception):
    """Base class for PLV toolbox errors."""


class InvalidFilterSpecError(PLVError, ValueError):
    """Band edges, order, method or sample rate cannot describe a valid band-pass filter."""


class InsufficientTrialsError(PLVError, ValueError):
    """Fewer than two trials; phase locking across trials is undefined."""


class WindowTooShortError(PLVError, ValueError):
    """The extraction window does not survive filter-transient trimming."""


class DegenerateSignalWarning(UserWarning):
    """Instantaneous phase is undefined at some samples (zero analytic amplitude)."""
