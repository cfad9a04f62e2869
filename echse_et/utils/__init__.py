"""
Utility modules for the ECHSE evapotranspiration tools.

Provides logging and exception handling utilities.
"""

from .logger import Logger, log_step, log_execution_time
from .exceptions import (
    ECHSEError,
    ConfigurationError,
    UnknownParameterError,
    MissingSourceError,
    DataInputError,
    TimeSeriesReadError,
    EmptySelectionError,
    EstimationError,
    EngineError,
    OutputError,
    VisualizationError,
    create_error_context
)

__all__ = [
    # Logger
    "Logger",
    "log_step",
    "log_execution_time",

    # Exceptions
    "ECHSEError",
    "ConfigurationError",
    "UnknownParameterError",
    "MissingSourceError",
    "DataInputError",
    "TimeSeriesReadError",
    "EmptySelectionError",
    "EstimationError",
    "EngineError",
    "OutputError",
    "VisualizationError",
    "create_error_context"
]
