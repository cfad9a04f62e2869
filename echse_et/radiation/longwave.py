"""Longwave radiation and net emissivity formulas for the ECHSE engines.

All functions are pure and evaluate elementwise, so they accept scalars,
numpy arrays and pandas Series alike.

The Stefan-Boltzmann law is used for the net longwave exchange:
    R_nl = -f * ε * σ * T⁴

Where:
    f = cloudiness correction factor (fcorr)
    ε = net emissivity between ground and atmosphere
    σ = 5.670367e-8 W/m²/K⁴
    T = air temperature in Kelvin
"""

import numpy as np

from ..core.constants import (
    STEFAN_BOLTZMANN,
    FREEZING_POINT,
    IDSO_OFFSET,
    IDSO_SCALE,
    IDSO_EXPONENT,
    MAGNUS_BASE,
    MAGNUS_A,
    MAGNUS_B,
)


def emissivity_brunt(emis_a, emis_b, vapor_kpa):
    """
    Compute net emissivity after Brunt (1932).

    ε = a + b * sqrt(e)

    Args:
        emis_a: Intercept parameter
        emis_b: Slope parameter
        vapor_kpa: Water vapour pressure in kPa

    Returns:
        Net emissivity (dimensionless)
    """
    return emis_a + emis_b * np.sqrt(vapor_kpa)


def emissivity_idso(ta_celsius):
    """
    Compute net emissivity after Idso & Jackson (1969), modified by
    Maidment (1993).

    ε = -0.02 + 0.261 * exp(-7.77e-4 * T²)

    Args:
        ta_celsius: Mean air temperature in °C

    Returns:
        Net emissivity (dimensionless)
    """
    return IDSO_OFFSET + IDSO_SCALE * np.exp(IDSO_EXPONENT * ta_celsius ** 2)


def vapor_pressure_magnus(ta_celsius, rh_percent):
    """
    Compute actual vapour pressure with the Magnus equation (Dyck & Peschke).

    e = 6.11 * 10^(7.5 * T / (237.3 + T)) * RH / 100

    Args:
        ta_celsius: Mean air temperature in °C
        rh_percent: Relative humidity in %

    Returns:
        Vapour pressure in hPa
    """
    return MAGNUS_BASE * 10 ** (MAGNUS_A * ta_celsius / (MAGNUS_B + ta_celsius)) * rh_percent / 100


def blackbody_emission(ta_celsius):
    """Blackbody emission σ * T⁴ for an air temperature in °C (W/m²)."""
    return STEFAN_BOLTZMANN * (ta_celsius + FREEZING_POINT) ** 4


def observed_emissivity(rld, rlu, ta_celsius):
    """
    Derive net emissivity from longwave observations, assuming fcorr = 1.

    ε = -(R_l↓ - R_l↑) / (σ * T⁴)

    Args:
        rld: Downward longwave radiation (W/m²)
        rlu: Upward longwave radiation (W/m²)
        ta_celsius: Mean air temperature in °C

    Returns:
        Observation-based net emissivity
    """
    return -(rld - rlu) / blackbody_emission(ta_celsius)


def fcorr_from_observations(rld, rlu, ta_celsius, emissivity):
    """
    Derive the cloudiness correction factor from longwave observations
    (adapted Stefan-Boltzmann law).

    f = -(R_l↓ - R_l↑) / (ε * σ * T⁴)

    Args:
        rld: Downward longwave radiation (W/m²)
        rlu: Upward longwave radiation (W/m²)
        ta_celsius: Mean air temperature in °C
        emissivity: Net emissivity from a model (Brunt or Idso)

    Returns:
        Raw correction factor
    """
    return -(rld - rlu) / (emissivity * blackbody_emission(ta_celsius))


__all__ = [
    'emissivity_brunt',
    'emissivity_idso',
    'vapor_pressure_magnus',
    'blackbody_emission',
    'observed_emissivity',
    'fcorr_from_observations',
]
