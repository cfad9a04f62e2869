"""Configuration settings for the ECHSE evapotranspiration tools."""

import json
from pathlib import Path
from typing import Optional, Union

import yaml

from ..utils.exceptions import ConfigurationError

# ============================================================================
# DATA PATHS
# ============================================================================

# Default directory for diagnostic figures (relative to the working directory)
PLOT_DIR = Path("doku") / "fig"

# ============================================================================
# INPUT FILES
# ============================================================================

# Column delimiter of observation and engine output files
DEFAULT_DELIMITER = "\t"

# File name fragments marking hourly text files
HOURLY_FILE_PATTERNS = (".dat", ".txt")

# Valid sampling resolutions of a data source
RESOLUTIONS = ("hourly", "subhourly")

# Observed variables understood by the estimator
VARIABLES = {
    "rsd": "downward shortwave radiation (W/m²)",
    "rsu": "upward shortwave radiation (W/m²)",
    "rx": "extraterrestrial radiation (W/m²)",
    "rld": "downward longwave radiation (W/m²)",
    "rlu": "upward longwave radiation (W/m²)",
    "ta": "mean air temperature (°C)",
    "hr": "relative humidity (%)",
    "rnet": "net radiation (W/m²)",
    "sheat": "soil heat flux (W/m²)",
}

# ============================================================================
# ESTIMATION PARAMETERS
# ============================================================================

# Exclusive hour-of-day bounds used to avoid odd night effects
DAYTIME_HOURS = (7, 17)

# Minimum downward shortwave radiation for the radex ratio (W/m²)
RADEX_MIN_RSD = 50.0

# Lower quantile of the radiation ratio
R_QUANTILE = 0.05

# Clear-sky ratio bounds (lower exclusive, upper inclusive)
CLEAR_SKY_RANGE = (0.9, 1.0)

# Exclusive hour-of-day bounds of the noon subset in emissivity diagnostics
NOON_HOURS = (9, 15)

# Accepted emissivity methods (lower-case key -> display name)
EMISSIVITY_METHODS = {
    "brunt": "Brunt",
    "idso": "Idso",
    "both": "both",
}

# ============================================================================
# ENGINE
# ============================================================================

ENGINE = {
    "projects_dir": "~/uni/projects",
    "runner": "./run",
    "config_name": "cnf_default",
    "output_file": "out/test1.txt",
    "time_column": "end_of_interval",
}

# ============================================================================
# RUN AND COMPARE
# ============================================================================

# Regions with observation setups; Morocco lacks net radiation and soil heat
REGIONS = ("portugal", "morocco")

# Moving-average window of the auxiliary evap panels (samples)
MA_WIDTH = 24

# Morocco has no net radiation sensor: rnet = factor * global radiation
MOROCCO_RNET_FACTOR = 0.8

# Morocco has no soil moisture sensor: moisture = factor * wc_sat
MOROCCO_MOISTURE_FACTOR = 0.9

# ============================================================================
# PLOTTING
# ============================================================================

FIGURE_DPI = 150

# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

LOGGING = {
    "level": "INFO",
    "verbose_level": "DEBUG",
}


def load_config(config_path: Optional[Union[str, Path]] = None) -> dict:
    """Load configuration from YAML or JSON file.

    Args:
        config_path: Path to a ``.yaml``, ``.yml`` or ``.json`` file.

    Returns:
        Configuration mapping (empty when no path is given)

    Raises:
        ConfigurationError: If the file is missing, unsupported or malformed
    """
    if config_path is None:
        return {}

    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f'Configuration file not found: {config_path}')

    try:
        if config_path.suffix in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f) or {}
        elif config_path.suffix == '.json':
            with open(config_path, 'r') as f:
                config = json.load(f)
        else:
            raise ConfigurationError(
                f'Unsupported config format: {config_path.suffix}. Use .yaml or .json'
            )
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f'Error loading config: {e}') from e

    if not isinstance(config, dict):
        raise ConfigurationError(f'Configuration must be a mapping: {config_path}')

    return config
