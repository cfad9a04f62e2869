"""
ECHSE ET tools - parameter estimation and evaluation for the ECHSE
evapotranspiration engines.

This package provides tools for:
- Loading and aligning observed time series (hourly and sub-hourly)
- Estimating albedo, clear-sky radiation (radex), cloudiness correction
  (fcorr), net emissivity (emis) and soil heat fraction (f) parameters
- Running simulation engines and comparing their results with observations

Version: 1.0.0
"""

__version__ = "1.0.0"

from echse_et.core import constants

from echse_et.io import (
    DataSource,
    EngineRunner,
    build_estimation_dataset,
)

from echse_et.estimation import (
    ParameterFamily,
    EstimationConfig,
    ParameterEstimator,
    estimate_parameters,
)

from echse_et.postprocess import (
    CompareVariable,
    CompareConfig,
    FrameObservationProvider,
    RunAndCompare,
)

__all__ = [
    # Version
    '__version__',

    # Core
    'constants',

    # IO
    'DataSource',
    'EngineRunner',
    'build_estimation_dataset',

    # Estimation
    'ParameterFamily',
    'EstimationConfig',
    'ParameterEstimator',
    'estimate_parameters',

    # Post-processing
    'CompareVariable',
    'CompareConfig',
    'FrameObservationProvider',
    'RunAndCompare',
]
