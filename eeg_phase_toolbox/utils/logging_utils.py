"""
Logging Utilities Module
-----------------------
Logger setup and tqdm progress reporting for PLV runs.
"""
import logging
from typing import Callable, Optional, Tuple

from tqdm import tqdm

DEFAULT_LOGGER_NAME = 'PLVLogger'
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def setup_logging(log_level: str = 'INFO', name: str = DEFAULT_LOGGER_NAME, log_file: Optional[str] = None) -> logging.Logger:
    """
    Sets up and returns a named logger with the specified log level.
    Handlers are only attached once, so repeated calls reuse the logger.

    Args:
        log_level (str): 'DEBUG', 'INFO', 'WARNING', 'ERROR' or 'CRITICAL'.
        name (str): Logger name.
        log_file (Optional[str]): Also write to this file when given.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
        if log_file:
            file_handler = logging.FileHandler(log_file, mode='w')
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
    logger.info(f"LoggingUtils: Logger '{name}' ready at level {log_level.upper()}.")
    return logger


def log_progress_bar(logger: logging.Logger, total_steps: int, desc: str = "PLV") -> Tuple[Callable[[int], None], Callable[[], None]]:
    """
    tqdm bar over `total_steps` tasks; each update is mirrored to the logger at DEBUG level.
    Returns (update, close) functions.
    """
    bar = tqdm(total=total_steps, desc=desc, ncols=70, bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]', leave=False)

    def update(step: int = 1) -> None:
        bar.update(step)
        logger.debug(bar.format_meter(bar.n, bar.total, bar.format_dict['elapsed']))

    def close() -> None:
        bar.close()

    return update, close
