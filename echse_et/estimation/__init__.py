"""
Parameter estimation module for the ECHSE evapotranspiration tools.

This module estimates albedo, clear-sky radiation, cloudiness correction,
net emissivity and soil heat fraction parameters from observations.
"""

from .families import ParameterFamily, REQUIRED_VARIABLES
from .results import (
    AlbedoEstimate,
    RadexEstimate,
    FcorrEstimate,
    FcorrResult,
    EmissivityEstimate,
    SoilHeatFractionEstimate,
)
from .estimator import (
    EstimationConfig,
    ParameterEstimator,
    estimate_parameters,
    ols_fit,
)

__all__ = [
    'ParameterFamily',
    'REQUIRED_VARIABLES',
    'AlbedoEstimate',
    'RadexEstimate',
    'FcorrEstimate',
    'FcorrResult',
    'EmissivityEstimate',
    'SoilHeatFractionEstimate',
    'EstimationConfig',
    'ParameterEstimator',
    'estimate_parameters',
    'ols_fit',
]
