"""
Post-processing module for the ECHSE evapotranspiration tools.

This module runs simulation engines and compares their results with
field observations.
"""

from .providers import CHANNELS, ObservationProvider, FrameObservationProvider
from .compare import (
    CompareVariable,
    CompareConfig,
    ComparisonResult,
    RunAndCompare,
    cumulative_from,
    moving_average,
    run_and_compare,
)

__all__ = [
    'CHANNELS',
    'ObservationProvider',
    'FrameObservationProvider',
    'CompareVariable',
    'CompareConfig',
    'ComparisonResult',
    'RunAndCompare',
    'cumulative_from',
    'moving_average',
    'run_and_compare',
]
