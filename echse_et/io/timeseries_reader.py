"""Time-series reader for observation data.

This module loads observed time series (radiation fluxes, temperature,
humidity, heat fluxes), collapses sub-hourly records to hourly means and
aligns several variables on their common timestamps.
"""

import pickle
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

import pandas as pd

from ..config.settings import DEFAULT_DELIMITER, HOURLY_FILE_PATTERNS, RESOLUTIONS, VARIABLES
from ..utils.exceptions import ConfigurationError, TimeSeriesReadError
from ..utils.logger import Logger


@dataclass(frozen=True)
class DataSource:
    """
    Binds an observed variable to its file.

    Attributes:
        path: Path to the data file
        resolution: 'hourly' (delimited text) or 'subhourly' (pickled
            series, averaged to hourly means). Inferred from the file name
            when None.
        sep: Column delimiter of text files
    """
    path: Path
    resolution: Optional[str] = None
    sep: str = DEFAULT_DELIMITER

    def __post_init__(self):
        object.__setattr__(self, "path", Path(self.path).expanduser())
        if self.resolution is not None and self.resolution not in RESOLUTIONS:
            raise ConfigurationError(
                f"Unknown resolution '{self.resolution}' for {self.path}. "
                f"Choose one of {RESOLUTIONS}.",
                config_param="resolution"
            )

    @property
    def effective_resolution(self) -> str:
        """Configured resolution, or the one implied by the file name."""
        if self.resolution is not None:
            return self.resolution
        if any(pattern in str(self.path) for pattern in HOURLY_FILE_PATTERNS):
            return "hourly"
        return "subhourly"


def read_timeseries(path: Union[str, Path], sep: str = DEFAULT_DELIMITER) -> pd.Series:
    """
    Read a delimited text file into a time series.

    The file has a header row; the first column holds timestamps and the
    second column the values.

    Args:
        path: Path to the text file
        sep: Column delimiter

    Returns:
        Series indexed by timestamp, sorted in time

    Raises:
        TimeSeriesReadError: If the file is missing or cannot be parsed
    """
    path = Path(path)

    if not path.exists():
        raise TimeSeriesReadError(f"Time-series file not found: {path}", file_path=str(path))

    try:
        df = pd.read_csv(path, sep=sep)
    except pd.errors.EmptyDataError:
        raise TimeSeriesReadError(f"Time-series file is empty: {path}", file_path=str(path))
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise TimeSeriesReadError(f"Failed to parse time series: {e}", file_path=str(path))

    if df.shape[1] < 2:
        raise TimeSeriesReadError(
            f"Expected two columns (timestamp, value) in {path}, found {df.shape[1]}",
            file_path=str(path)
        )

    try:
        index = pd.DatetimeIndex(pd.to_datetime(df.iloc[:, 0]))
        values = pd.to_numeric(df.iloc[:, 1]).to_numpy(dtype=float)
    except (ValueError, TypeError) as e:
        raise TimeSeriesReadError(f"Invalid timestamp or value in {path}: {e}", file_path=str(path))

    series = pd.Series(values, index=index, name=str(df.columns[1]))
    return _ordered(series, path)


def read_subhourly_series(path: Union[str, Path]) -> pd.Series:
    """
    Read a pickled sub-hourly time series.

    Args:
        path: Path to a pickled pandas Series (or one-column DataFrame)
            with a DatetimeIndex

    Returns:
        Series indexed by timestamp, sorted in time

    Raises:
        TimeSeriesReadError: If the file is missing or holds no time series
    """
    path = Path(path)

    if not path.exists():
        raise TimeSeriesReadError(f"Time-series file not found: {path}", file_path=str(path))

    try:
        obj = pd.read_pickle(path)
    except (pickle.UnpicklingError, EOFError, ValueError) as e:
        raise TimeSeriesReadError(f"Failed to unpickle time series: {e}", file_path=str(path))

    if isinstance(obj, pd.DataFrame) and obj.shape[1] == 1:
        obj = obj.iloc[:, 0]

    if not isinstance(obj, pd.Series) or not isinstance(obj.index, pd.DatetimeIndex):
        raise TimeSeriesReadError(
            f"Expected a time-indexed series in {path}, got {type(obj).__name__}",
            file_path=str(path)
        )

    return _ordered(obj.astype(float), path)


def _ordered(series: pd.Series, path: Path) -> pd.Series:
    """Sort by time and keep the first of duplicated timestamps."""
    series = series.sort_index(kind="mergesort")
    duplicated = series.index.duplicated(keep="first")
    if duplicated.any():
        Logger.warning(f"Dropping {int(duplicated.sum())} duplicated timestamps in {path}")
        series = series[~duplicated]
    return series


def hourly_mean(series: pd.Series) -> pd.Series:
    """
    Collapse a sub-hourly series to hourly means.

    Samples within the same clock hour [H:00, H+1:00) are averaged and the
    mean is labelled with the ending timestamp H+1:00. The first and last
    hours are discarded because they may be incomplete; hours without
    samples are not emitted.

    Args:
        series: Sub-hourly series with a DatetimeIndex

    Returns:
        Hourly series
    """
    if series.empty:
        return series.copy()

    binned = series.resample("h", closed="left", label="right").mean()
    return binned.iloc[1:-1].dropna()


def load_source(source: DataSource) -> pd.Series:
    """
    Load one data source as an hourly series.

    Args:
        source: DataSource to load

    Returns:
        Hourly series
    """
    resolution = source.effective_resolution
    Logger.debug(f"Loading {resolution} data from {source.path}")

    if resolution == "hourly":
        return read_timeseries(source.path, sep=source.sep)
    return hourly_mean(read_subhourly_series(source.path))


def merge_inner(series: Mapping[str, pd.Series]) -> pd.DataFrame:
    """
    Align series on the timestamps present in all of them.

    Args:
        series: Mapping of variable name to series

    Returns:
        DataFrame with one column per variable, in mapping order
    """
    names = list(series)
    if not names:
        return pd.DataFrame()

    frame = pd.concat([series[name].rename(name) for name in names], axis=1, join="inner")
    frame.columns = names
    return frame.sort_index()


def build_estimation_dataset(
    sources: Mapping[str, DataSource],
    variables: Optional[Iterable[str]] = None
) -> pd.DataFrame:
    """
    Load data sources and merge them into a common estimation dataset.

    Args:
        sources: Mapping of variable name to DataSource
        variables: Variables to load (all sources when None)

    Returns:
        DataFrame restricted to timestamps present in every variable
    """
    variables = list(variables) if variables is not None else list(sources)
    unknown = [name for name in variables if name not in VARIABLES]
    if unknown:
        Logger.warning(f"Unrecognized variables in estimation dataset: {', '.join(unknown)}")
    loaded = {name: load_source(sources[name]) for name in variables}
    dataset = merge_inner(loaded)

    Logger.info(
        f"Estimation dataset: {len(dataset)} rows from {', '.join(variables)}"
    )
    if dataset.empty:
        Logger.warning("Estimation dataset is empty, the sources share no timestamps")

    return dataset


def sources_from_config(
    config: Mapping,
    base_dir: Optional[Union[str, Path]] = None
) -> Dict[str, DataSource]:
    """
    Build data sources from a configuration mapping.

    Each entry is either a path string or a mapping with ``path`` and the
    optional keys ``resolution`` and ``sep``.

    Args:
        config: Mapping of variable name to source specification
        base_dir: Directory relative paths are resolved against, usually
            the directory of the configuration file

    Returns:
        Mapping of variable name to DataSource

    Raises:
        ConfigurationError: If an entry has no path
    """
    def resolve(path) -> Path:
        path = Path(path).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = Path(base_dir) / path
        return path

    sources = {}
    for name, entry in (config or {}).items():
        if isinstance(entry, (str, Path)):
            sources[name] = DataSource(resolve(entry))
            continue
        if not isinstance(entry, Mapping) or "path" not in entry:
            raise ConfigurationError(
                f"Source '{name}' needs a path", config_param=f"sources.{name}"
            )
        sources[name] = DataSource(
            resolve(entry["path"]),
            resolution=entry.get("resolution"),
            sep=entry.get("sep", DEFAULT_DELIMITER),
        )
    return sources
