"""Visualization module for the ECHSE evapotranspiration tools.

This module provides the diagnostic figures written during parameter
estimation and the comparison figures of the run-and-compare
post-processor. Figures are side products; none of them feeds back into
the numeric results.
"""

from typing import List, Mapping, Optional, Sequence, Tuple, Union
from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from echse_et.config.settings import FIGURE_DPI
from echse_et.core.constants import MAIDMENT_FCORR_B
from echse_et.utils.exceptions import VisualizationError
from echse_et.utils.logger import Logger


class DiagnosticPlots:
    """Diagnostic and comparison figures.

    Attributes:
        output_dir: Directory the figures are written to
        figure_dpi: DPI for output figures
    """

    SIMULATION_COLOR = 'tab:red'
    OBSERVATION_COLOR = 'black'
    REGRESSION_COLOR = 'tab:blue'

    def __init__(
        self,
        output_dir: Union[str, Path] = ".",
        figure_dpi: int = FIGURE_DPI
    ):
        """Initialize the DiagnosticPlots class.

        Args:
            output_dir: Output directory for figure files
            figure_dpi: DPI for output figures
        """
        self.output_dir = Path(output_dir)
        self.figure_dpi = figure_dpi

        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _save_figure(self, fig: plt.Figure, filename: str) -> str:
        """Save figure to the output directory and close it.

        Args:
            fig: Matplotlib figure object
            filename: File name inside the output directory

        Returns:
            Output file path

        Raises:
            VisualizationError: If the figure cannot be written
        """
        output_path = self.output_dir / filename
        try:
            fig.savefig(
                output_path,
                dpi=self.figure_dpi,
                bbox_inches='tight',
                facecolor='white'
            )
        except (OSError, ValueError) as e:
            raise VisualizationError(
                f"Could not write figure: {e}", plot_type=filename, output_path=str(output_path)
            ) from e
        finally:
            plt.close(fig)

        Logger.debug(f"Wrote figure {output_path}")
        return str(output_path)

    # ------------------------------------------------------------------
    # Parameter estimation diagnostics
    # ------------------------------------------------------------------

    def plot_albedo(self, ratios: pd.Series, filename: str = "plot_alb.pdf") -> str:
        """Daily mean albedo ratios."""
        daily = ratios.resample('D').mean().dropna()

        fig, ax = plt.subplots(figsize=(6, 4))
        ax.plot(daily.index, daily.values, '.', color=self.OBSERVATION_COLOR)
        ax.set_ylabel('albedo')
        ax.grid(True, alpha=0.3)
        fig.autofmt_xdate()

        return self._save_figure(fig, filename)

    def plot_radex(
        self,
        ratios: pd.Series,
        lower_quantile: float,
        filename: str = "plot_radex.pdf"
    ) -> str:
        """Histogram of rsd/rx ratios and their spread over the hours of day.

        Args:
            ratios: Ratio series indexed by timestamp
            lower_quantile: Value of the lower ratio quantile (radex_a)
            filename: Output file name

        Returns:
            Output file path
        """
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(8, 4))

        ax1.hist(ratios.dropna().values, bins='sturges', color='steelblue', edgecolor='white')
        ax1.set_xlim(0, 1)
        ax1.set_xlabel('glorad/radex')
        ax1.set_ylabel('Frequency')

        ax2.plot(ratios.index.hour, ratios.values, 'o', mfc='none', color=self.OBSERVATION_COLOR)
        ax2.axhline(lower_quantile, linestyle='--', color=self.OBSERVATION_COLOR)
        ax2.set_ylim(0, 1)
        ax2.set_xlabel('hour of day')
        ax2.set_ylabel('glorad/radex')

        plt.tight_layout()
        return self._save_figure(fig, filename)

    def plot_fcorr(
        self,
        clear_sky_ratio: pd.Series,
        fcorr: Mapping[str, pd.Series],
        intercepts: Mapping[str, float],
        filename: str = "plot_fcorr.pdf"
    ) -> str:
        """Raw fcorr against the clear-sky ratio with the forced regression line.

        Args:
            clear_sky_ratio: rsd / clear-sky estimate
            fcorr: Raw fcorr per emissivity method
            intercepts: Regression intercept per method
            filename: Output file name

        Returns:
            Output file path
        """
        methods = list(fcorr)
        fig, axes = plt.subplots(len(methods), 1, figsize=(6, 4 * len(methods)), squeeze=False)
        line_x = np.array([0.0, 1.0])

        for ax, method in zip(axes[:, 0], methods):
            ax.plot(clear_sky_ratio.values, fcorr[method].values, 'o', mfc='none',
                    color=self.OBSERVATION_COLOR)
            b = intercepts[method]
            ax.plot(line_x, b + (1 - b) * line_x, color=self.REGRESSION_COLOR,
                    label='adapted regression')
            ax.plot(line_x, MAIDMENT_FCORR_B + (1 - MAIDMENT_FCORR_B) * line_x, '--',
                    color=self.REGRESSION_COLOR, label='Maidment (1993)')
            ax.set_ylabel('fcorr')
            ax.set_title(f'emis: {method}')
            ax.legend(loc='upper left')

        axes[-1, 0].set_xlabel('R_inS / R_inS,cs')
        plt.tight_layout()
        return self._save_figure(fig, filename)

    def plot_emissivity(
        self,
        observed: pd.Series,
        predicted: Mapping[str, pd.Series],
        noon: pd.Series,
        filename: str = "plot_emis_both.pdf"
    ) -> str:
        """Observation-based emissivity against model predictions.

        Args:
            observed: Emissivity derived from observations (clear-sky rows)
            predicted: Model emissivity per method on the same rows
            noon: Boolean series marking noon rows
            filename: Output file name

        Returns:
            Output file path
        """
        fig, axes = plt.subplots(1, len(predicted), figsize=(9, 5), squeeze=False)

        for ax, (method, values) in zip(axes[0], predicted.items()):
            ax.plot(values[~noon].values, observed[~noon].values, 'o', mfc='none',
                    color=self.OBSERVATION_COLOR, label='rest of day')
            ax.plot(values[noon].values, observed[noon].values, '.',
                    color=self.OBSERVATION_COLOR, label='noon')
            ax.plot([0, 1], [0, 1], color='gray')
            ax.set_xlim(0, 0.25)
            ax.set_ylim(0, 0.25)
            ax.set_xlabel(f'emissivity, predicted by {method} model')
            ax.legend(loc='upper left', frameon=False)

        axes[0, 0].set_ylabel('emissivity, derived from observations')
        plt.tight_layout()
        return self._save_figure(fig, filename)

    def plot_soil_heat(
        self,
        dataset: pd.DataFrame,
        is_day: np.ndarray,
        is_night: np.ndarray,
        window: Optional[Tuple[str, str]] = None,
        filename: str = "plot_f.pdf"
    ) -> str:
        """Soil heat flux, net radiation and their ratio by day and night.

        Args:
            dataset: Frame with ``rnet`` and ``sheat`` columns
            is_day: Daytime row mask
            is_night: Nighttime row mask
            window: Optional (start, end) date strings limiting the figure
            filename: Output file name

        Returns:
            Output file path
        """
        frame = dataset
        day = pd.Series(is_day, index=dataset.index)
        night = pd.Series(is_night, index=dataset.index)
        if window is not None:
            frame = dataset.loc[window[0]:window[1]]
            day = day.loc[window[0]:window[1]]
            night = night.loc[window[0]:window[1]]

        fig, axes = plt.subplots(2, 2, figsize=(12, 8), sharex=True)

        for col, (label, mask) in enumerate((('day', day), ('night', night))):
            part = frame[mask.values]
            axes[0, col].plot(part.index, part['sheat'], '.', color=self.OBSERVATION_COLOR,
                              label='soil heat')
            axes[0, col].plot(part.index, part['rnet'], '.', color=self.SIMULATION_COLOR,
                              label='net radiation')
            axes[0, col].set_title(label)
            axes[0, col].legend(loc='upper right')
            ratio = part['sheat'].abs() / part['rnet'].abs()
            axes[1, col].plot(part.index, ratio, '.', color=self.OBSERVATION_COLOR)
            axes[1, col].set_ylabel('soil heat/net radiation')

        fig.autofmt_xdate()
        plt.tight_layout()
        return self._save_figure(fig, filename)

    # ------------------------------------------------------------------
    # Simulation versus observation
    # ------------------------------------------------------------------

    def plot_comparison(
        self,
        simulated: pd.Series,
        observed: pd.Series,
        title: str,
        ylabel: str,
        filename: str,
        ylim: Optional[Tuple[float, float]] = None
    ) -> str:
        """Simulated and observed series on one axis."""
        fig, ax = plt.subplots(figsize=(12, 6))

        ax.plot(simulated.index, simulated.values, color=self.SIMULATION_COLOR, label='simulation')
        ax.plot(observed.index, observed.values, color=self.OBSERVATION_COLOR, label='observation')
        if ylim is not None:
            ax.set_ylim(*ylim)
        ax.set_title(title)
        ax.set_ylabel(ylabel)
        ax.set_xlabel('Date')
        ax.legend(loc='upper right')
        ax.grid(True, alpha=0.3)
        fig.autofmt_xdate()

        plt.tight_layout()
        return self._save_figure(fig, filename)

    def plot_evap_panel(
        self,
        auxiliary: Mapping[str, pd.Series],
        simulated: pd.Series,
        observed: pd.Series,
        title: str,
        filename: str
    ) -> str:
        """Stacked moving averages of the drivers above the ET comparison.

        Args:
            auxiliary: Moving-averaged driver series keyed by label
            simulated: Simulated ET
            observed: Observed ET
            title: Figure title
            filename: Output file name

        Returns:
            Output file path
        """
        labels: List[str] = list(auxiliary)
        heights: Sequence[float] = [1.0] * len(labels) + [3.0]
        fig, axes = plt.subplots(
            len(labels) + 1, 1, figsize=(8, 10), sharex=True,
            gridspec_kw={'height_ratios': heights}
        )

        for ax, label in zip(axes[:-1], labels):
            values = auxiliary[label]
            if values is None or np.all(pd.isna(values)):
                ax.text(0.5, 0.5, f'{label} not available', ha='center', va='center',
                        transform=ax.transAxes)
            else:
                ax.plot(values.index, values.values, color=self.OBSERVATION_COLOR)
            ax.set_ylabel(label)
        axes[0].set_title(title)

        axes[-1].plot(observed.index, observed.values, color=self.OBSERVATION_COLOR,
                      label='observation')
        axes[-1].plot(simulated.index, simulated.values, color=self.SIMULATION_COLOR,
                      label='simulation')
        axes[-1].set_ylabel('ET (mm)')
        axes[-1].set_xlabel('Date')
        axes[-1].legend(loc='upper right', frameon=False)
        fig.autofmt_xdate()

        plt.tight_layout()
        return self._save_figure(fig, filename)


__all__ = ['DiagnosticPlots']
