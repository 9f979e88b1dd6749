"""
Central logging configuration and debug decorator.

Provides structured logging with file and console handlers, plus a decorator
for automatic stage-level observability of the market data pipeline.
"""

import functools
import logging
import os
import traceback
from pathlib import Path
from time import time
from typing import Any, Callable, TypeVar

# Type variable for function return types
F = TypeVar("F", bound=Callable[..., Any])

# Log file path (override with MARKET_DATA_LOG_FILE)
LOG_FILE = Path(
    os.environ.get(
        "MARKET_DATA_LOG_FILE",
        Path(__file__).resolve().parent.parent / "pipeline_debug.log",
    )
)

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(module)s]: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Configure package logger
_logger = logging.getLogger("market_data")
_logger.setLevel(logging.DEBUG)

# Prevent duplicate handlers
if not _logger.handlers:
    # Console handler (INFO level)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    _logger.addHandler(console_handler)

    # File handler (DEBUG level)
    try:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_FILE, mode="a", encoding="utf-8")
    except OSError as exc:
        _logger.warning(f"File logging disabled, cannot open {LOG_FILE}: {exc}")
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        _logger.addHandler(file_handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Optional module name. If None, returns the package logger.

    Returns:
        Logger instance configured with file and console handlers.
    """
    if name:
        if name.startswith("market_data."):
            return logging.getLogger(name)
        return logging.getLogger(f"market_data.{name}")
    return _logger


def debug_watcher(func: F) -> F:
    """
    Decorator that logs function entry, execution time, and exceptions.

    Logs:
    - Function start with (truncated) arguments
    - Function completion with execution time
    - Full traceback on exceptions (to file only)

    Args:
        func: Function to wrap.

    Returns:
        Wrapped function with logging.
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        func_name = func.__name__
        start_time = time()

        # Raw CSV text can be large; only a short prefix is logged
        args_str = ", ".join([str(arg)[:60] for arg in args[:3]])
        kwargs_str = ", ".join([f"{k}={str(v)[:50]}" for k, v in list(kwargs.items())[:3]])
        params_str = ", ".join(filter(None, [args_str, kwargs_str]))
        logger.info(f"Starting {func_name}... ({params_str!r})")

        try:
            result = func(*args, **kwargs)

            elapsed = time() - start_time
            logger.info(f"Completed {func_name} in {elapsed:.3f} seconds.")

            return result

        except Exception as e:
            elapsed = time() - start_time
            error_msg = f"Exception in {func_name} after {elapsed:.3f} seconds: {type(e).__name__}: {str(e)}"
            logger.error(error_msg)
            logger.debug(f"Full traceback for {func_name}:\n{traceback.format_exc()}")

            raise

    return wrapper  # type: ignore[return-value]
