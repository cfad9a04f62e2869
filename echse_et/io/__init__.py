"""Input/Output module for the ECHSE evapotranspiration tools."""

from .timeseries_reader import (
    DataSource,
    read_timeseries,
    read_subhourly_series,
    hourly_mean,
    load_source,
    merge_inner,
    build_estimation_dataset,
    sources_from_config,
)
from .engine import EngineRunner

__all__ = [
    'DataSource',
    'read_timeseries',
    'read_subhourly_series',
    'hourly_mean',
    'load_source',
    'merge_inner',
    'build_estimation_dataset',
    'sources_from_config',
    'EngineRunner',
]
