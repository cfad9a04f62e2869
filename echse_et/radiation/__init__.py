"""Radiation formulas for the ECHSE evapotranspiration tools."""

from .longwave import (
    emissivity_brunt,
    emissivity_idso,
    vapor_pressure_magnus,
    blackbody_emission,
    observed_emissivity,
    fcorr_from_observations,
)
from .sun import sun_times, daylight_mask

__all__ = [
    'emissivity_brunt',
    'emissivity_idso',
    'vapor_pressure_magnus',
    'blackbody_emission',
    'observed_emissivity',
    'fcorr_from_observations',
    'sun_times',
    'daylight_mask',
]
