"""Observation providers for the run-and-compare post-processor.

A provider hands out observed channels of one field site by name, so the
post-processor never looks up site tables by constructing variable names.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping

import pandas as pd

from ..io.timeseries_reader import DataSource, load_source
from ..utils.exceptions import DataInputError
from ..utils.logger import Logger

# Channels understood by the post-processor
CHANNELS = {
    "rsd": "total incoming shortwave radiation (W/m²)",
    "hr": "relative air humidity (%)",
    "rnet": "net radiation (W/m²)",
    "ta": "air temperature (°C)",
    "sheat": "soil heat flux (W/m²)",
    "soil_moisture": "soil moisture content (-)",
    "wind": "wind speed (m/s)",
    "et": "evapotranspiration (mm)",
}


class ObservationProvider(ABC):
    """Source of observed channels for one field site."""

    @abstractmethod
    def channels(self) -> Iterable[str]:
        """Names of the available channels."""

    @abstractmethod
    def channel(self, name: str) -> pd.Series:
        """
        Observed series of a channel.

        Raises:
            DataInputError: If the channel is not available
        """

    def has_channel(self, name: str) -> bool:
        return name in set(self.channels())


class FrameObservationProvider(ObservationProvider):
    """
    Observation provider backed by a DataFrame with one column per channel.

    Attributes:
        frame: Observations indexed by timestamp
        site: Field station label
    """

    def __init__(self, frame: pd.DataFrame, site: str = None):
        if not isinstance(frame.index, pd.DatetimeIndex):
            raise DataInputError("Observation frame needs a DatetimeIndex", input_type="observations")
        self.frame = frame.sort_index()
        self.site = site

    @classmethod
    def from_sources(cls, sources: Mapping[str, DataSource], site: str = None) -> 'FrameObservationProvider':
        """
        Load every source as a channel.

        Channels keep all their timestamps (outer join); gaps become NaN.

        Args:
            sources: Mapping of channel name to DataSource
            site: Field station label

        Returns:
            FrameObservationProvider
        """
        unknown = set(sources) - set(CHANNELS)
        if unknown:
            Logger.warning(f"Loading channels without known meaning: {sorted(unknown)}")

        series = [load_source(source).rename(name) for name, source in sources.items()]
        frame = pd.concat(series, axis=1, join="outer") if series else pd.DataFrame(
            index=pd.DatetimeIndex([])
        )
        Logger.info(f"Loaded {len(series)} observation channels for site {site}")
        return cls(frame, site=site)

    def channels(self) -> Iterable[str]:
        return list(self.frame.columns)

    def channel(self, name: str) -> pd.Series:
        if name not in self.frame.columns:
            raise DataInputError(
                f"Observation channel '{name}' not available"
                + (f" for site {self.site}" if self.site else ""),
                input_type="observations",
                details={"available": list(self.frame.columns)}
            )
        return self.frame[name]

    def __repr__(self) -> str:
        return f"FrameObservationProvider(site={self.site}, channels={list(self.frame.columns)})"


__all__ = ['CHANNELS', 'ObservationProvider', 'FrameObservationProvider']
