"""
Parameter estimation for the ECHSE evapotranspiration engines.

This module estimates empirical model parameters from observed time series:
albedo, the clear-sky radiation coefficients radex_a/radex_b, the
cloudiness correction coefficients fcorr_a/fcorr_b, the net emissivity
coefficients emis_a/emis_b and the soil heat fractions f_day/f_night.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..config.settings import (
    CLEAR_SKY_RANGE,
    DAYTIME_HOURS,
    EMISSIVITY_METHODS,
    NOON_HOURS,
    PLOT_DIR,
    R_QUANTILE,
    RADEX_MIN_RSD,
)
from ..core.constants import BRUNT_A, BRUNT_B, HPA_TO_KPA
from ..io.timeseries_reader import DataSource, build_estimation_dataset
from ..radiation.longwave import (
    emissivity_brunt,
    emissivity_idso,
    fcorr_from_observations,
    observed_emissivity,
    vapor_pressure_magnus,
)
from ..radiation.sun import daylight_mask
from ..utils.exceptions import (
    ConfigurationError,
    EmptySelectionError,
    EstimationError,
    MissingSourceError,
)
from ..utils.logger import Logger, log_execution_time, log_step
from .families import ParameterFamily
from .results import (
    AlbedoEstimate,
    EmissivityEstimate,
    FcorrEstimate,
    FcorrResult,
    RadexEstimate,
    SoilHeatFractionEstimate,
)

BRUNT_LABEL = "Brunt"
IDSO_LABEL = "Idso & Jackson"


@dataclass
class EstimationConfig:
    """Configuration for parameter estimation."""
    # Clear-sky radiation coefficients, needed by fcorr and emis
    radex_a: Optional[float] = None
    radex_b: Optional[float] = None

    # Lower quantile of the rsd/rx ratio giving radex_a
    r_quantile: float = R_QUANTILE

    # Emissivity model for fcorr: 'Brunt', 'Idso' or 'both'
    emis_method: Optional[str] = None

    # Site coordinates for sunrise/sunset (decimal degrees)
    lat: float = 0.0
    lon: float = 0.0

    # Field station label used in figure names
    site: Optional[str] = None

    # Diagnostic figures
    plots: bool = True
    plot_dir: Path = PLOT_DIR
    plot_window: Optional[Tuple[str, str]] = None

    # Exclusive hour-of-day bounds of the daytime filter
    daytime_hours: Tuple[int, int] = DAYTIME_HOURS

    @classmethod
    def from_dict(cls, mapping: Optional[Mapping]) -> 'EstimationConfig':
        """
        Create a configuration from a mapping, e.g. a parsed YAML section.

        Raises:
            ConfigurationError: If the mapping holds unknown keys
        """
        mapping = dict(mapping or {})
        known = {f.name for f in fields(cls)}
        unknown = set(mapping) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown estimation settings: {sorted(unknown)}", config_param="estimation"
            )
        if mapping.get("plot_dir") is not None:
            mapping["plot_dir"] = Path(mapping["plot_dir"])
        for key in ("plot_window", "daytime_hours"):
            if mapping.get(key) is not None:
                mapping[key] = tuple(mapping[key])
        return cls(**mapping)

    def emissivity_labels(self) -> List[str]:
        """
        Emissivity models requested for fcorr.

        Raises:
            ConfigurationError: If the method is unknown
        """
        key = str(self.emis_method).strip().lower() if self.emis_method is not None else None
        if key not in EMISSIVITY_METHODS:
            raise ConfigurationError(
                f"Unknown emissivity method '{self.emis_method}'! "
                "Choose either 'Idso' or 'Brunt' or 'both'.",
                config_param="emis_method"
            )
        if key == "brunt":
            return [BRUNT_LABEL]
        if key == "idso":
            return [IDSO_LABEL]
        return [BRUNT_LABEL, IDSO_LABEL]

    def clear_sky_factor(self) -> float:
        """
        Sum radex_a + radex_b scaling extraterrestrial to clear-sky radiation.

        Raises:
            ConfigurationError: If either coefficient is missing
        """
        for name in ("radex_a", "radex_b"):
            value = getattr(self, name)
            if value is None or pd.isna(value):
                raise ConfigurationError(
                    f"{name} is required, estimate the radex family first", config_param=name
                )
        return float(self.radex_a) + float(self.radex_b)


def ols_fit(x, y) -> Tuple[float, float]:
    """
    Ordinary least squares fit of y on x with intercept.

    Non-finite pairs are ignored.

    Args:
        x: Predictor values
        y: Response values

    Returns:
        Tuple of (intercept, slope)

    Raises:
        EstimationError: If fewer than two distinct predictor values remain
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    finite = np.isfinite(x) & np.isfinite(y)
    x, y = x[finite], y[finite]

    if len(x) < 2 or np.ptp(x) == 0:
        raise EstimationError(
            f"Regression needs at least two distinct predictor values, got {len(np.unique(x))}"
        )

    slope, intercept = np.polyfit(x, y, 1)
    return float(intercept), float(slope)


class ParameterEstimator:
    """
    Estimate ECHSE model parameters from observations.

    The estimator loads the variables a family needs from its data sources,
    merges them on common timestamps, restricts them to a validity window and
    reduces them to one or two coefficients.

    Attributes:
        sources: Mapping of variable name to DataSource
        config: Estimation settings

    Example:
        >>> estimator = ParameterEstimator(
        ...     {"rsd": DataSource("rsd.dat"), "rsu": DataSource("rsu.dat")},
        ...     EstimationConfig(plots=False)
        ... )
        >>> estimator.estimate("alb").alb
    """

    def __init__(
        self,
        sources: Mapping[str, DataSource],
        config: Optional[EstimationConfig] = None,
        plotter=None
    ):
        """
        Initialize the estimator.

        Args:
            sources: Mapping of variable name to DataSource
            config: Optional configuration. Uses defaults if not provided.
            plotter: Optional DiagnosticPlots instance; created on demand
                when plots are enabled.
        """
        self.sources = dict(sources)
        self.config = config or EstimationConfig()
        self._plotter = plotter

    @property
    def plotter(self):
        """Figure writer, created on first use."""
        if self._plotter is None:
            from ..output.visualization import DiagnosticPlots
            self._plotter = DiagnosticPlots(self.config.plot_dir)
        return self._plotter

    @log_execution_time
    def estimate(self, parname: str):
        """
        Estimate the parameter group a name belongs to.

        Args:
            parname: Parameter name, e.g. ``alb``, ``radex_a``, ``fcorr``,
                ``emis_b``, ``f_day``

        Returns:
            Estimate object of the family

        Raises:
            UnknownParameterError: If the name matches no family
            MissingSourceError: If a required variable has no data source
        """
        family = ParameterFamily.resolve(parname)
        handlers = {
            ParameterFamily.ALB: self.estimate_albedo,
            ParameterFamily.RADEX: self.estimate_radex,
            ParameterFamily.FCORR: self.estimate_fcorr,
            ParameterFamily.EMIS: self.estimate_emissivity,
            ParameterFamily.F: self.estimate_soil_heat_fraction,
        }

        # Settings errors surface before any file is read.
        if family is ParameterFamily.FCORR:
            self.config.emissivity_labels()
        if family in (ParameterFamily.FCORR, ParameterFamily.EMIS):
            self.config.clear_sky_factor()

        with log_step(f"Estimating {family.value} parameters", scope=family.value, parname=parname):
            dataset = self.load_dataset(family)
            return handlers[family](dataset)

    def load_dataset(self, family: ParameterFamily) -> pd.DataFrame:
        """
        Load and merge the variables a family needs.

        Raises:
            MissingSourceError: If a required variable has no data source
        """
        missing = [v for v in family.variables if v not in self.sources]
        if missing:
            raise MissingSourceError(
                f"No data source for {', '.join(missing)} (needed by {family.value})",
                variable=missing[0]
            )
        return build_estimation_dataset(self.sources, family.variables)

    def _daytime(self, index: pd.DatetimeIndex) -> np.ndarray:
        """Rows strictly inside the daytime hour bounds."""
        start, end = self.config.daytime_hours
        hours = np.asarray(index.hour)
        return (hours > start) & (hours < end)

    def _figure_name(self, stem: str) -> str:
        if self.config.site:
            return f"{stem}_{self.config.site}.pdf"
        return f"{stem}.pdf"

    # ------------------------------------------------------------------
    # Families
    # ------------------------------------------------------------------

    def estimate_albedo(self, dataset: pd.DataFrame) -> AlbedoEstimate:
        """
        Estimate albedo as the mean ratio of upward to downward shortwave.

        Only daytime rows with non-zero fluxes and ratios below 1 are used.

        Args:
            dataset: Frame with ``rsd`` and ``rsu`` columns

        Returns:
            AlbedoEstimate

        Raises:
            EmptySelectionError: If no row passes the filter
        """
        ix = self._daytime(dataset.index) & (dataset["rsd"] != 0).to_numpy() & \
            (dataset["rsu"] != 0).to_numpy()
        ratios = dataset["rsu"][ix] / dataset["rsd"][ix]
        ratios = ratios[ratios < 1]

        if ratios.empty:
            raise EmptySelectionError("No daytime shortwave ratios below 1 for albedo", family="alb")

        estimate = AlbedoEstimate(alb=float(ratios.mean()), n_samples=len(ratios))
        Logger.info(f"alb = {estimate.alb:.4f} from {estimate.n_samples} samples")

        if self.config.plots:
            self.plotter.plot_albedo(ratios, filename="plot_alb.pdf")

        return estimate

    def estimate_radex(self, dataset: pd.DataFrame) -> RadexEstimate:
        """
        Estimate the clear-sky radiation coefficients.

        radex_a is the lower quantile of rsd/rx, radex_b the difference
        between the largest hourly maximum ratio (ratios below 1 only) and
        radex_a.

        Args:
            dataset: Frame with ``rx`` and ``rsd`` columns

        Returns:
            RadexEstimate

        Raises:
            EmptySelectionError: If no row passes the filter or no hourly
                maximum below 1 exists
        """
        ix = self._daytime(dataset.index) & (dataset["rx"] != 0).to_numpy() & \
            (dataset["rsd"] > RADEX_MIN_RSD).to_numpy()
        selected = dataset[ix]

        if selected.empty:
            raise EmptySelectionError("No daytime samples with rx != 0 and rsd > 50", family="radex")

        ratio = selected["rsd"] / selected["rx"]

        start, end = self.config.daytime_hours
        hourly_max: Dict[int, float] = {}
        for hour in range(start + 1, end):
            in_hour = ratio[ratio.index.hour == hour]
            in_hour = in_hour[in_hour < 1]
            if not in_hour.empty:
                hourly_max[hour] = float(in_hour.max())

        if not hourly_max:
            raise EmptySelectionError("No hourly radiation ratio below 1", family="radex")

        r_max = max(hourly_max.values())
        a = float(ratio.quantile(self.config.r_quantile))
        estimate = RadexEstimate(a=a, b=r_max - a, r_max=r_max, quantile=self.config.r_quantile)

        Logger.debug(f"Hourly maximum ratios: {hourly_max}")
        Logger.info(f"radex_a = {estimate.a:.4f}, radex_b = {estimate.b:.4f} (r_max = {r_max:.4f})")

        if self.config.plots:
            self.plotter.plot_radex(ratio, a, filename="plot_radex.pdf")

        return estimate

    def estimate_fcorr(self, dataset: pd.DataFrame) -> FcorrResult:
        """
        Estimate the cloudiness correction coefficients.

        fcorr is derived from the longwave balance and a net emissivity
        model, then regressed on the clear-sky ratio rsd / ((radex_a +
        radex_b) * rx). The regression line is pinned to (1, 1) because
        fcorr_a + fcorr_b must equal 1; its intercept is kept as fcorr_b.

        Args:
            dataset: Frame with ``ta``, ``hr``, ``rld``, ``rlu``, ``rsd``,
                ``rx`` columns

        Returns:
            FcorrResult with one estimate per requested emissivity method

        Raises:
            ConfigurationError: If the emissivity method or radex
                coefficients are invalid
            EmptySelectionError: If no row passes the filter
        """
        labels = self.config.emissivity_labels()
        factor = self.config.clear_sky_factor()

        ta = dataset["ta"]
        emissivity = {}
        if BRUNT_LABEL in labels:
            vapor = vapor_pressure_magnus(ta, dataset["hr"])
            emissivity[BRUNT_LABEL] = emissivity_brunt(BRUNT_A, BRUNT_B, vapor * HPA_TO_KPA)
        if IDSO_LABEL in labels:
            emissivity[IDSO_LABEL] = emissivity_idso(ta)

        ix = self._daytime(dataset.index) & (dataset["rx"] != 0).to_numpy()
        if not ix.any():
            raise EmptySelectionError("No daytime samples with rx != 0", family="fcorr")

        clear_sky_ratio = (dataset["rsd"] / (factor * dataset["rx"]))[ix]

        raw_fcorr = {}
        intercepts = {}
        estimates = []
        for label in labels:
            raw = fcorr_from_observations(dataset["rld"], dataset["rlu"], ta, emissivity[label])[ix]
            intercept, slope = ols_fit(clear_sky_ratio, raw)
            Logger.debug(f"fcorr regression ({label}): intercept={intercept:.4f}, slope={slope:.4f}")

            raw_fcorr[label] = raw
            intercepts[label] = intercept
            estimates.append(FcorrEstimate(method=label, a=1.0 - intercept, b=intercept))
            Logger.info(f"fcorr ({label}): a = {1.0 - intercept:.4f}, b = {intercept:.4f}")

        if self.config.plots:
            suffix = "both" if len(labels) > 1 else labels[0].split()[0].lower()
            self.plotter.plot_fcorr(clear_sky_ratio, raw_fcorr, intercepts,
                                    filename=f"plot_fcorr_{suffix}.pdf")

        return FcorrResult(estimates=tuple(estimates))

    def estimate_emissivity(self, dataset: pd.DataFrame) -> EmissivityEstimate:
        """
        Compare observation-based net emissivity with the Brunt and Idso
        models under clear skies.

        emis_a and emis_b cannot be identified from the available data,
        so the literature values are returned; the comparison is logged and
        plotted for diagnosis only.

        Args:
            dataset: Frame with ``rsd``, ``rx``, ``rld``, ``rlu``, ``ta``,
                ``hr`` columns

        Returns:
            EmissivityEstimate(0.34, -0.14)
        """
        factor = self.config.clear_sky_factor()
        lower, upper = CLEAR_SKY_RANGE

        clear_sky_ratio = dataset["rsd"] / (factor * dataset["rx"])
        ix_clear = ((clear_sky_ratio > lower) & (clear_sky_ratio <= upper)).to_numpy()
        clear = dataset[ix_clear]

        hours = np.asarray(clear.index.hour)
        noon = pd.Series((hours > NOON_HOURS[0]) & (hours < NOON_HOURS[1]), index=clear.index)

        observed = observed_emissivity(clear["rld"], clear["rlu"], clear["ta"])
        predicted = {
            BRUNT_LABEL: emissivity_brunt(
                BRUNT_A, BRUNT_B, vapor_pressure_magnus(clear["ta"], clear["hr"]) * HPA_TO_KPA
            ),
            IDSO_LABEL: emissivity_idso(clear["ta"]),
        }

        if clear.empty:
            Logger.warning("No clear-sky samples for the emissivity comparison")
        else:
            for label, values in predicted.items():
                bias = float((observed - values).mean())
                Logger.info(f"Clear-sky emissivity bias vs {label}: {bias:.4f} ({len(clear)} samples)")
            if self.config.plots:
                self.plotter.plot_emissivity(observed, predicted, noon,
                                             filename=self._figure_name("plot_emis_both"))

        return EmissivityEstimate(a=BRUNT_A, b=BRUNT_B)

    def estimate_soil_heat_fraction(self, dataset: pd.DataFrame) -> SoilHeatFractionEstimate:
        """
        Estimate the soil heat fraction separately for day and night.

        Rows are split by the astronomical sunrise and sunset of their day
        at the configured coordinates; the fraction is the mean of
        |soil heat| / |net radiation|. Rows with zero net radiation are
        skipped.

        Args:
            dataset: Frame with ``rnet`` and ``sheat`` columns

        Returns:
            SoilHeatFractionEstimate (NaN for a half without samples)
        """
        is_day, is_night = daylight_mask(dataset.index, self.config.lat, self.config.lon)

        rnet = dataset["rnet"]
        ratio = dataset["sheat"].abs() / rnet.abs().where(rnet != 0)

        fractions = {}
        for label, mask in (("day", is_day), ("night", is_night)):
            values = ratio[mask].dropna()
            if values.empty:
                Logger.warning(f"No {label}time samples for the soil heat fraction")
                fractions[label] = float("nan")
            else:
                fractions[label] = float(values.mean())

        estimate = SoilHeatFractionEstimate(f_day=fractions["day"], f_night=fractions["night"])
        Logger.info(f"f_day = {estimate.f_day:.4f}, f_night = {estimate.f_night:.4f}")

        if self.config.plots:
            self.plotter.plot_soil_heat(dataset, is_day, is_night, window=self.config.plot_window,
                                        filename=self._figure_name("plot_f"))

        return estimate


def estimate_parameters(
    parname: str,
    sources: Mapping[str, Union[DataSource, str, Path]],
    **settings
):
    """
    Convenience function to estimate one parameter group.

    Args:
        parname: Parameter name (``alb``, ``radex*``, ``fcorr*``, ``emis*``, ``f*``)
        sources: Mapping of variable name to DataSource or file path
        **settings: EstimationConfig fields

    Returns:
        Estimate object of the family
    """
    resolved = {
        name: src if isinstance(src, DataSource) else DataSource(Path(src))
        for name, src in sources.items()
    }
    return ParameterEstimator(resolved, EstimationConfig.from_dict(settings)).estimate(parname)


__all__ = [
    'EstimationConfig',
    'ParameterEstimator',
    'estimate_parameters',
    'ols_fit',
    'BRUNT_LABEL',
    'IDSO_LABEL',
]
