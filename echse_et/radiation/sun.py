"""Astronomical sunrise and sunset times.

Uses the simple orbital model of the ``suncalc`` routine from the R package
RAtmosphere: the sun's height above the equatorial plane is derived from a
circular orbit, the half day length from the geometry of the horizon plane,
and solar noon from an equation-of-time approximation. Times are decimal
hours in the local zone approximated from the longitude.
"""

from typing import Tuple

import numpy as np

EARTH_RADIUS_KM = 6378.0
ORBIT_RADIUS_KM = 149598000.0
AXIAL_TILT = np.deg2rad(23.45)

# Minutes added to the half day length for refraction and the solar disc
HORIZON_ALLOWANCE_MIN = 5.0


def sun_times(day_of_year, lat: float, lon: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Calculate sunrise and sunset for given days of the year.

    Args:
        day_of_year: Day of year (1-366), scalar or array
        lat: Site latitude in decimal degrees
        lon: Site longitude in decimal degrees (east positive)

    Returns:
        Tuple of (sunrise, sunset) in decimal hours

    Notes:
        Inside the polar circles the horizon term is clipped, giving a
        zero-length day in polar night and a full day in polar summer.
    """
    d = np.asarray(day_of_year, dtype=float)
    lat_rad = np.deg2rad(lat)
    timezone = -4.0 * (abs(lon) % 15) * np.sign(lon)

    theta = 2 * np.pi / 365.25 * (d - 80)
    zs = ORBIT_RADIUS_KM * np.sin(theta) * np.sin(AXIAL_TILT)
    rp = np.sqrt(ORBIT_RADIUS_KM ** 2 - zs ** 2)

    cos_t0 = (EARTH_RADIUS_KM - zs * np.sin(lat_rad)) / (rp * np.cos(lat_rad))
    t0 = 1440 / (2 * np.pi) * np.arccos(np.clip(cos_t0, -1.0, 1.0))
    half_day = t0 + HORIZON_ALLOWANCE_MIN

    noon = 720 - 10 * np.sin(4 * np.pi * (d - 80) / 365.25) + 8 * np.sin(2 * np.pi * d / 365.25)

    sunrise = (noon - half_day + timezone) / 60
    sunset = (noon + half_day + timezone) / 60
    return sunrise, sunset


def daylight_mask(index, lat: float, lon: float):
    """
    Split a DatetimeIndex into daytime and nighttime rows.

    A row is daytime when its hour lies strictly between sunrise and sunset
    of its day, nighttime when it lies strictly before sunrise or after
    sunset. Rows whose hour equals sunrise or sunset exactly fall in neither.

    Args:
        index: pandas.DatetimeIndex
        lat: Site latitude in decimal degrees
        lon: Site longitude in decimal degrees

    Returns:
        Tuple of boolean numpy arrays (is_day, is_night)
    """
    hours = np.asarray(index.hour, dtype=float)
    sunrise, sunset = sun_times(np.asarray(index.dayofyear), lat, lon)
    is_day = (hours > sunrise) & (hours < sunset)
    is_night = (hours < sunrise) | (hours > sunset)
    return is_day, is_night


__all__ = ['sun_times', 'daylight_mask']
