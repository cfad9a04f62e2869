"""Core module for the ECHSE evapotranspiration tools."""

from .constants import (
    STEFAN_BOLTZMANN,
    FREEZING_POINT,
    BRUNT_A,
    BRUNT_B,
    MAIDMENT_FCORR_B,
    HPA_TO_KPA,
)

__all__ = [
    'STEFAN_BOLTZMANN',
    'FREEZING_POINT',
    'BRUNT_A',
    'BRUNT_B',
    'MAIDMENT_FCORR_B',
    'HPA_TO_KPA',
]
