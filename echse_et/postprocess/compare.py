"""
Run-and-compare post-processing for the ECHSE engines.

Runs a simulation engine, reads its result and sets it against the
observations of the field site: evapotranspiration, global radiation, net
radiation or soil heat flux, each as a time series and as cumulative sums.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import pandas as pd

from ..config.settings import (
    ENGINE,
    MA_WIDTH,
    MOROCCO_MOISTURE_FACTOR,
    MOROCCO_RNET_FACTOR,
    PLOT_DIR,
    REGIONS,
)
from ..io.engine import EngineRunner
from ..utils.exceptions import ConfigurationError, EngineError
from ..utils.logger import Logger, log_execution_time, log_step
from .providers import ObservationProvider


class CompareVariable(Enum):
    """Quantities the simulation can be compared on."""

    EVAP = "evap"
    GLORAD = "glorad"
    RAD_NET = "rad_net"
    SOILHEAT = "soilheat"

    @classmethod
    def parse(cls, value: Union[str, "CompareVariable"]) -> "CompareVariable":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown comparison variable '{value}'. "
                f"Choose one of {[v.value for v in cls]}.",
                config_param="compare"
            ) from None


# (quantity label, unit) per comparison
_LABELS = {
    CompareVariable.EVAP: ("ET", "mm"),
    CompareVariable.GLORAD: ("Global radiation", "W/m²"),
    CompareVariable.RAD_NET: ("Net radiation", "W/m²"),
    CompareVariable.SOILHEAT: ("Soil heat flux", "W/m²"),
}

# Observation channel per comparison
_CHANNELS = {
    CompareVariable.EVAP: "et",
    CompareVariable.GLORAD: "rsd",
    CompareVariable.RAD_NET: "rnet",
    CompareVariable.SOILHEAT: "sheat",
}


def moving_average(
    series: pd.Series,
    period: pd.DatetimeIndex,
    na_value: float,
    width: int
) -> pd.Series:
    """
    Trailing moving average of a series over a fixed period.

    The series is reindexed to ``period`` and missing samples are replaced
    by ``na_value`` before averaging, so the first ``width - 1`` values are
    NaN and all others are means of exactly ``width`` samples.

    Args:
        series: Observed series
        period: Timestamps of the result
        na_value: Substitute for missing samples
        width: Number of samples per mean

    Returns:
        Smoothed series indexed by ``period``
    """
    if width < 1:
        raise ConfigurationError(f"Moving-average width must be positive, got {width}",
                                 config_param="ma_width")
    values = series.reindex(period).fillna(na_value)
    return values.rolling(window=width, min_periods=width).mean()


def cumulative_from(simulated: pd.Series, observed: pd.Series):
    """
    Cumulative sums of simulation and observation from the first simulated
    timestamp on. Observed gaps are dropped before summing.
    """
    first = simulated.index[0]
    observed = observed[observed.index >= first].dropna()
    return simulated.cumsum(), observed.cumsum()


@dataclass
class ComparisonResult:
    """Result of one run-and-compare pass."""
    variable: CompareVariable
    region: str
    result_mean: float
    simulated: pd.Series
    observed: Optional[pd.Series] = None
    simulated_cumsum: Optional[pd.Series] = None
    observed_cumsum: Optional[pd.Series] = None
    auxiliary: Dict[str, Optional[pd.Series]] = field(default_factory=dict)
    plot_paths: List[str] = field(default_factory=list)

    @property
    def compared(self) -> bool:
        """False when the region has no observation for the variable."""
        return self.observed is not None


@dataclass
class CompareConfig:
    """Configuration of the run-and-compare post-processor."""
    engine: str
    start: str
    end: str
    projects_dir: Path = Path(ENGINE["projects_dir"])
    config_name: str = ENGINE["config_name"]
    runner: str = ENGINE["runner"]
    output_file: str = ENGINE["output_file"]

    # Field station and region; region defaults to the engine name suffix
    site: Optional[str] = None
    region: Optional[str] = None

    # Auxiliary panels
    ma_width: int = MA_WIDTH
    wc_res: float = 0.0
    wc_sat: float = 1.0

    plots: bool = True
    plot_dir: Path = PLOT_DIR

    @classmethod
    def from_dict(cls, mapping: Optional[Mapping]) -> 'CompareConfig':
        """
        Create a configuration from a mapping, e.g. a parsed YAML section.

        Raises:
            ConfigurationError: If required keys are missing or unknown
                keys are present
        """
        mapping = dict(mapping or {})
        known = {f.name for f in fields(cls)}
        unknown = set(mapping) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown compare settings: {sorted(unknown)}", config_param="compare"
            )
        missing = [key for key in ("engine", "start", "end") if key not in mapping]
        if missing:
            raise ConfigurationError(
                f"Missing compare settings: {missing}", config_param="compare"
            )
        for key in ("projects_dir", "plot_dir"):
            if mapping.get(key) is not None:
                mapping[key] = Path(mapping[key])
        for key in ("start", "end"):
            mapping[key] = str(mapping[key])
        return cls(**mapping)

    def make_runner(self) -> EngineRunner:
        return EngineRunner(
            self.projects_dir,
            self.engine,
            config_name=self.config_name,
            runner=self.runner,
            output_file=self.output_file
        )


class RunAndCompare:
    """
    Run an ECHSE engine and compare its result with observations.

    Attributes:
        runner: Engine runner
        provider: Observations of the field site
        start: First timestamp of the comparison period
        end: Last timestamp of the comparison period
        site: Field station label
        region: ``portugal`` or ``morocco``
        ma_width: Moving-average window of the auxiliary panels
        wc_res: Residual water content, fills soil moisture gaps
        wc_sat: Saturated water content, basis of the Morocco soil moisture
        plots: Whether to write figures

    Example:
        >>> compare = RunAndCompare(
        ...     EngineRunner("~/uni/projects", "evap_portugal"),
        ...     FrameObservationProvider(observations, site="HS"),
        ...     "2014-01-01", "2014-12-31", site="HS"
        ... )
        >>> compare.run("evap").result_mean
    """

    def __init__(
        self,
        runner: EngineRunner,
        provider: ObservationProvider,
        start,
        end,
        site: Optional[str] = None,
        ma_width: int = MA_WIDTH,
        wc_res: float = 0.0,
        wc_sat: float = 1.0,
        region: Optional[str] = None,
        plots: bool = True,
        plot_dir: Union[str, Path] = PLOT_DIR,
        plotter=None
    ):
        self.runner = runner
        self.provider = provider
        self.start = pd.Timestamp(start)
        self.end = pd.Timestamp(end)
        if self.end < self.start:
            raise ConfigurationError(f"Comparison ends before it starts: {start} > {end}",
                                     config_param="end")
        self.site = site
        self.ma_width = ma_width
        self.wc_res = wc_res
        self.wc_sat = wc_sat
        self.region = (region or runner.region).lower()
        if self.region not in REGIONS:
            raise ConfigurationError(
                f"Unknown region '{self.region}'. Choose one of {REGIONS}.",
                config_param="region"
            )
        self.plots = plots
        self.plot_dir = Path(plot_dir)
        self._plotter = plotter

    @classmethod
    def from_config(cls, config: CompareConfig, provider: ObservationProvider) -> 'RunAndCompare':
        return cls(
            config.make_runner(),
            provider,
            config.start,
            config.end,
            site=config.site,
            ma_width=config.ma_width,
            wc_res=config.wc_res,
            wc_sat=config.wc_sat,
            region=config.region,
            plots=config.plots,
            plot_dir=config.plot_dir
        )

    @property
    def plotter(self):
        """Figure writer, created on first use."""
        if self._plotter is None:
            from ..output.visualization import DiagnosticPlots
            self._plotter = DiagnosticPlots(self.plot_dir)
        return self._plotter

    @property
    def period(self) -> pd.DatetimeIndex:
        """Hourly timestamps from start to end."""
        return pd.date_range(self.start, self.end, freq="h")

    def _figure_name(self, compare: CompareVariable, kind: str) -> str:
        parts = [f"plot_{compare.value}_{kind}", self.region]
        if self.site:
            parts.append(self.site)
        parts += [self.start.strftime("%Y-%m-%d"), self.end.strftime("%Y-%m-%d")]
        return "_".join(parts) + ".pdf"

    def _title(self) -> str:
        return " ".join(p for p in (self.runner.engine, self.site) if p)

    @log_execution_time
    def run(self, compare: Union[str, CompareVariable], execute: bool = True) -> ComparisonResult:
        """
        Run the engine and compare its result with observations.

        Args:
            compare: ``evap``, ``glorad``, ``rad_net`` or ``soilheat``
            execute: Run the engine first; when False the existing output is
                read as is

        Returns:
            ComparisonResult; ``result_mean`` is the mean of the simulation

        Raises:
            ConfigurationError: If the variable is unknown
            EngineError: If the engine fails or produces no result
            DataInputError: If a needed observation channel is missing
        """
        compare = CompareVariable.parse(compare)

        with log_step(f"Comparing {compare.value} for {self.runner.engine}",
                      scope=self.runner.engine, variable=compare.value):
            if execute:
                self.runner.run()
            simulated = self.runner.read_output()
            if simulated.empty:
                raise EngineError(f"Engine output is empty: {self.runner.output_path}",
                                  engine=self.runner.engine)

            result_mean = float(simulated.mean())
            Logger.info(f"Mean of simulated {compare.value}: {result_mean:.4f}")

            if compare is CompareVariable.EVAP:
                return self._compare_evap(simulated, result_mean)
            if compare is CompareVariable.GLORAD:
                return self._compare_glorad(simulated, result_mean)
            return self._compare_portugal_only(compare, simulated, result_mean)

    # ------------------------------------------------------------------
    # Comparisons
    # ------------------------------------------------------------------

    def _auxiliary(self) -> Dict[str, Optional[pd.Series]]:
        """Moving averages of the drivers shown above the ET comparison."""
        period = self.period
        width = self.ma_width
        channel = self.provider.channel

        rad = channel("rsd")
        temp = channel("ta")
        if self.region == "portugal":
            rnet = channel("rnet")
            soilheat = moving_average(channel("sheat"), period, 0.0, width)
            moisture = moving_average(channel("soil_moisture"), period, self.wc_res, width)
        else:
            rnet = MOROCCO_RNET_FACTOR * rad
            soilheat = None
            moisture = pd.Series(MOROCCO_MOISTURE_FACTOR * self.wc_sat, index=period)

        return {
            "Rad (W/m²)": moving_average(rad, period, 0.0, width),
            "Net rad. (W/m²)": moving_average(rnet, period, 0.0, width),
            "Temp (°C)": moving_average(temp, period, float(temp.mean()), width),
            "SHF (W/m²)": soilheat,
            "S.moist (-)": moisture,
            "Rel.hum. (%)": moving_average(channel("hr"), period, 0.0, width),
            "Wind (m/s)": moving_average(channel("wind"), period, 0.0, width),
        }

    def _compare_evap(self, simulated: pd.Series, result_mean: float) -> ComparisonResult:
        compare = CompareVariable.EVAP
        auxiliary = self._auxiliary()
        observed_et = self.provider.channel("et")

        if self.region == "portugal":
            compared = simulated
            observed = observed_et.reindex(self.period)
        else:
            # Morocco observes daily sums only
            compared = simulated.resample("D").sum()
            observed = observed_et.loc[self.start.normalize():self.end].dropna()

        simulated_cumsum, observed_cumsum = cumulative_from(simulated, observed)
        observed_total = observed_cumsum.iloc[-1] if len(observed_cumsum) else float("nan")
        Logger.info(
            f"Cumulative ET: simulated {simulated_cumsum.iloc[-1]:.2f} mm, "
            f"observed {observed_total:.2f} mm"
        )

        result = ComparisonResult(
            variable=compare,
            region=self.region,
            result_mean=result_mean,
            simulated=compared,
            observed=observed,
            simulated_cumsum=simulated_cumsum,
            observed_cumsum=observed_cumsum,
            auxiliary=auxiliary,
        )

        if self.plots:
            result.plot_paths.append(self.plotter.plot_evap_panel(
                auxiliary, compared, observed, self._title(),
                filename=self._figure_name(compare, "compare")
            ))
            result.plot_paths.append(self._plot_cumulative(compare, simulated_cumsum, observed_cumsum))

        return result

    def _compare_glorad(self, simulated: pd.Series, result_mean: float) -> ComparisonResult:
        compare = CompareVariable.GLORAD
        rad = self.provider.channel(_CHANNELS[compare])
        observed = rad.loc[self.start.normalize():self.end].resample("D").mean()
        return self._finish(compare, simulated, observed, result_mean)

    def _compare_portugal_only(
        self,
        compare: CompareVariable,
        simulated: pd.Series,
        result_mean: float
    ) -> ComparisonResult:
        if self.region != "portugal":
            Logger.warning(f"No {compare.value} observations in {self.region}, comparison skipped")
            return ComparisonResult(
                variable=compare, region=self.region, result_mean=result_mean, simulated=simulated
            )

        observed = self.provider.channel(_CHANNELS[compare]).loc[self.start:self.end]
        return self._finish(compare, simulated, observed, result_mean)

    def _finish(
        self,
        compare: CompareVariable,
        simulated: pd.Series,
        observed: pd.Series,
        result_mean: float
    ) -> ComparisonResult:
        simulated_cumsum, observed_cumsum = cumulative_from(simulated, observed)
        result = ComparisonResult(
            variable=compare,
            region=self.region,
            result_mean=result_mean,
            simulated=simulated,
            observed=observed,
            simulated_cumsum=simulated_cumsum,
            observed_cumsum=observed_cumsum,
        )

        if self.plots:
            label, unit = _LABELS[compare]
            result.plot_paths.append(self.plotter.plot_comparison(
                simulated, observed, self._title(), f"{label} ({unit})",
                filename=self._figure_name(compare, "compare")
            ))
            result.plot_paths.append(self._plot_cumulative(compare, simulated_cumsum, observed_cumsum))

        return result

    def _plot_cumulative(
        self,
        compare: CompareVariable,
        simulated_cumsum: pd.Series,
        observed_cumsum: pd.Series
    ) -> str:
        label, unit = _LABELS[compare]
        return self.plotter.plot_comparison(
            simulated_cumsum, observed_cumsum, self._title(), f"cumulative {label} ({unit})",
            filename=self._figure_name(compare, "cum")
        )


def run_and_compare(
    config: Union[CompareConfig, Mapping],
    provider: ObservationProvider,
    compare: Union[str, CompareVariable]
) -> ComparisonResult:
    """
    Convenience function to run one comparison.

    Args:
        config: CompareConfig or mapping accepted by CompareConfig.from_dict
        provider: Observations of the field site
        compare: Comparison variable

    Returns:
        ComparisonResult
    """
    if not isinstance(config, CompareConfig):
        config = CompareConfig.from_dict(config)
    return RunAndCompare.from_config(config, provider).run(compare)


__all__ = [
    'CompareVariable',
    'CompareConfig',
    'ComparisonResult',
    'RunAndCompare',
    'cumulative_from',
    'moving_average',
    'run_and_compare',
]
