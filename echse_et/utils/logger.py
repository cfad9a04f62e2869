"""
Logger utilities for the ECHSE evapotranspiration tools.

Records carry a ``scope`` field naming what is being worked on: the
parameter family during estimation, the engine during run-and-compare.
"""

from loguru import logger
import sys
from typing import Optional
from contextlib import contextmanager, nullcontext
from pathlib import Path

from .exceptions import ECHSEError, create_error_context

DEFAULT_SCOPE = "echse"

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[scope]: <13}</magenta> | <cyan>{message}</cyan>"
)


class Logger:
    """
    Static logging facade for the estimator, post-processor and CLI.

    Console output goes to stderr so estimates printed by the CLI on
    stdout stay machine readable.
    """

    level: str = "INFO"

    @staticmethod
    def setup(
        log_file: Optional[str] = None,
        level: str = "INFO",
        console: bool = True,
        rotation: str = "10 MB",
        retention: str = "10 files"
    ) -> None:
        """
        Initialize logger sinks.

        Args:
            log_file: Path to log file (optional)
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            console: Whether to output to stderr
            rotation: Log file rotation size
            retention: Log file retention policy
        """
        logger.remove()
        logger.configure(extra={"scope": DEFAULT_SCOPE})

        if console:
            logger.add(sys.stderr, format=LOG_FORMAT, level=level, colorize=True, diagnose=False)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                str(log_path),
                format=LOG_FORMAT,
                level=level,
                rotation=rotation,
                retention=retention,
                diagnose=False
            )

        Logger.level = level

    @staticmethod
    @contextmanager
    def scope(label: str):
        """Tag every record emitted inside the block with ``label``."""
        with logger.contextualize(scope=label):
            yield

    @staticmethod
    def debug(message: str, **kwargs) -> None:
        logger.opt(depth=1).debug(message, **kwargs)

    @staticmethod
    def info(message: str, **kwargs) -> None:
        logger.opt(depth=1).info(message, **kwargs)

    @staticmethod
    def warning(message: str, **kwargs) -> None:
        logger.opt(depth=1).warning(message, **kwargs)

    @staticmethod
    def error(message: str, **kwargs) -> None:
        logger.opt(depth=1).error(message, **kwargs)

    @staticmethod
    def log_step(step: str, status: str = "COMPLETED") -> None:
        """Log processing step"""
        logger.info(f"[{status}] {step}")

    @staticmethod
    def configure_for_testing() -> None:
        """Configure logger for testing (quiet mode)"""
        Logger.setup(level="DEBUG", console=False)


@contextmanager
def log_step(name: str, scope: Optional[str] = None, **context):
    """
    Context manager for logging processing steps.

    Keyword context (e.g. ``parname``) is attached to any ECHSEError
    leaving the block, without overwriting details the error already has.

    Usage:
        with log_step("Estimating radex", scope="radex", parname="radex_a"):
            # do work
    """
    with Logger.scope(scope) if scope else nullcontext():
        Logger.info(f"Starting: {name}")
        try:
            yield
        except ECHSEError as e:
            for key, value in context.items():
                if key not in e.details:
                    e.add_detail(key, value)
            Logger.log_step(name, "FAILED")
            Logger.error(f"Error in {name}: {create_error_context(e, context)}")
            raise
        except Exception as e:
            Logger.log_step(name, "FAILED")
            Logger.error(f"Error in {name}: {e}")
            raise
        Logger.log_step(name, "COMPLETED")


def log_execution_time(func):
    """
    Decorator to log function execution time.

    Usage:
        @log_execution_time
        def my_function():
            pass
    """
    import time
    from functools import wraps

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        Logger.debug(f"{func.__name__} took {time.time() - start_time:.4f} seconds")
        return result
    return wrapper
