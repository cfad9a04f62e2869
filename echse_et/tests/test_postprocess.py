"""
Unit tests for the run-and-compare post-processor of the ECHSE ET tools.

Tests moving averages, observation providers and the comparisons for both
regions.
"""

import pytest
import numpy as np
import pandas as pd
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))


def make_compare(runner, frame, region=None, **kwargs):
    from echse_et.postprocess import FrameObservationProvider, RunAndCompare

    settings = dict(site="HS", ma_width=3, wc_res=0.05, wc_sat=0.4, plots=False)
    settings.update(kwargs)
    return RunAndCompare(
        runner,
        FrameObservationProvider(frame, site="HS"),
        "2014-06-01 00:00",
        "2014-06-02 23:00",
        region=region,
        **settings
    )


class TestMovingAverage:
    """Test trailing moving average."""

    def test_gaps_filled(self):
        """Missing samples are replaced before averaging."""
        from echse_et.postprocess import moving_average

        period = pd.date_range("2014-06-01 00:00", periods=5, freq="h")
        series = pd.Series([1.0, 2.0, 3.0, np.nan, 5.0], index=period)

        result = moving_average(series, period, 0.0, 2)

        assert np.isnan(result.iloc[0])
        assert list(result.iloc[1:]) == [1.5, 2.5, 1.5, 2.5]

    def test_reindexed_to_period(self):
        """Timestamps outside the series take the fill value."""
        from echse_et.postprocess import moving_average

        period = pd.date_range("2014-06-01 00:00", periods=4, freq="h")
        series = pd.Series([4.0], index=period[:1])

        result = moving_average(series, period, 2.0, 1)

        assert result.index.equals(period)
        assert list(result) == [4.0, 2.0, 2.0, 2.0]

    def test_invalid_width(self):
        """Test non-positive width raises ConfigurationError."""
        from echse_et.postprocess import moving_average
        from echse_et.utils.exceptions import ConfigurationError

        period = pd.date_range("2014-06-01", periods=3, freq="h")
        with pytest.raises(ConfigurationError):
            moving_average(pd.Series(1.0, index=period), period, 0.0, 0)


class TestCumulative:
    """Test cumulative sums."""

    def test_starts_at_first_simulated_timestamp(self):
        """Observations before the simulation and gaps are left out."""
        from echse_et.postprocess import cumulative_from

        simulated = pd.Series([1.0, 1.0], index=pd.date_range("2014-06-01 02:00", periods=2, freq="h"))
        observed = pd.Series([5.0, 5.0, 2.0, np.nan, 3.0],
                             index=pd.date_range("2014-06-01 00:00", periods=5, freq="h"))

        sim_cum, obs_cum = cumulative_from(simulated, observed)

        assert list(sim_cum) == [1.0, 2.0]
        assert list(obs_cum) == [2.0, 5.0]


class TestObservationProvider:
    """Test frame-backed observation provider."""

    def test_channel(self, observation_frame):
        """Test channel lookup by name."""
        from echse_et.postprocess import FrameObservationProvider

        provider = FrameObservationProvider(observation_frame, site="HS")

        assert provider.has_channel("et")
        assert not provider.has_channel("rld")
        assert provider.channel("wind").iloc[0] == 2.0

    def test_missing_channel(self, observation_frame):
        """Test missing channel raises DataInputError."""
        from echse_et.postprocess import FrameObservationProvider
        from echse_et.utils.exceptions import DataInputError

        provider = FrameObservationProvider(observation_frame[["rsd"]], site="NSA")

        with pytest.raises(DataInputError, match="NSA"):
            provider.channel("sheat")

    def test_needs_datetime_index(self):
        """Test frames without DatetimeIndex are rejected."""
        from echse_et.postprocess import FrameObservationProvider
        from echse_et.utils.exceptions import DataInputError

        with pytest.raises(DataInputError):
            FrameObservationProvider(pd.DataFrame({"et": [1.0, 2.0]}))

    def test_from_sources(self, tmp_path, observation_frame, series_writer):
        """Channels with different timestamps are outer-joined."""
        from echse_et.io import DataSource
        from echse_et.postprocess import FrameObservationProvider

        rsd = series_writer(tmp_path / "rsd.dat", observation_frame["rsd"])
        wind = series_writer(tmp_path / "wind.dat", observation_frame["wind"].iloc[:10])

        provider = FrameObservationProvider.from_sources(
            {"rsd": DataSource(rsd), "wind": DataSource(wind)}, site="HS"
        )

        assert len(provider.frame) == len(observation_frame)
        assert provider.channel("wind").isna().sum() == len(observation_frame) - 10


class TestCompareVariable:
    """Test comparison variable parsing."""

    def test_parse(self):
        """Test names parse case-insensitively."""
        from echse_et.postprocess import CompareVariable

        assert CompareVariable.parse("EVAP") is CompareVariable.EVAP
        assert CompareVariable.parse(CompareVariable.GLORAD) is CompareVariable.GLORAD

    def test_unknown(self):
        """Test unknown variable raises ConfigurationError."""
        from echse_et.postprocess import CompareVariable
        from echse_et.utils.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            CompareVariable.parse("albedo")


class TestCompareConfig:
    """Test compare configuration."""

    def test_from_dict(self):
        """Test configuration from a parsed mapping."""
        from echse_et.postprocess import CompareConfig

        config = CompareConfig.from_dict({
            "engine": "evap_portugal", "start": "2014-01-01", "end": "2014-12-31",
            "projects_dir": "/srv/projects", "site": "HS"
        })

        assert config.projects_dir == Path("/srv/projects")
        runner = config.make_runner()
        assert runner.run_dir == Path("/srv/projects/evap_portugal/run")
        assert runner.region == "portugal"

    def test_missing_keys(self):
        """Test engine and period are required."""
        from echse_et.postprocess import CompareConfig
        from echse_et.utils.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError, match="engine"):
            CompareConfig.from_dict({"start": "2014-01-01", "end": "2014-12-31"})

    def test_unknown_keys(self):
        """Test unknown settings are rejected."""
        from echse_et.postprocess import CompareConfig
        from echse_et.utils.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            CompareConfig.from_dict({"engine": "evap_portugal", "start": "2014-01-01",
                                     "end": "2014-12-31", "station": "HS"})


class TestRunAndCompare:
    """Test comparisons for Portugal and Morocco."""

    def test_region_from_engine(self, static_runner, simulated_series, observation_frame):
        """Test region defaults to the engine name suffix."""
        compare = make_compare(static_runner("evap_morocco", simulated_series), observation_frame)

        assert compare.region == "morocco"

    def test_unknown_region(self, static_runner, simulated_series, observation_frame):
        """Test unknown region raises ConfigurationError."""
        from echse_et.utils.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            make_compare(static_runner("evap_spain", simulated_series), observation_frame)

    def test_evap_portugal(self, static_runner, simulated_series, observation_frame):
        """Test hourly ET comparison with auxiliary drivers."""
        runner = static_runner("evap_portugal", simulated_series)
        result = make_compare(runner, observation_frame).run("evap")

        assert runner.calls == 1
        assert result.result_mean == pytest.approx(0.1)
        assert result.simulated_cumsum.iloc[-1] == pytest.approx(4.7)
        # 00:00 precedes the simulation and 05:00 is missing
        assert result.observed_cumsum.iloc[-1] == pytest.approx(46 * 0.05)
        assert result.auxiliary["SHF (W/m²)"].iloc[-1] == pytest.approx(20.0)
        assert result.auxiliary["S.moist (-)"].iloc[-1] == pytest.approx(0.25)
        assert result.plot_paths == []

    def test_evap_morocco(self, static_runner, simulated_series, observation_frame):
        """Morocco compares daily sums and derives missing drivers."""
        daily_et = pd.Series([2.0, 2.2], index=pd.date_range("2014-06-01", periods=2, freq="D"))
        frame = observation_frame.drop(columns=["rnet", "sheat", "soil_moisture", "et"])
        frame = frame.join(daily_et.rename("et"))

        result = make_compare(static_runner("evap_morocco", simulated_series), frame).run("evap")

        assert list(result.simulated.round(6)) == [2.3, 2.4]
        assert result.observed_cumsum.iloc[-1] == pytest.approx(2.2)
        assert result.auxiliary["SHF (W/m²)"] is None
        assert result.auxiliary["S.moist (-)"].iloc[-1] == pytest.approx(0.9 * 0.4)
        assert not result.auxiliary["S.moist (-)"].isna().any()
        rad = result.auxiliary["Rad (W/m²)"]
        assert np.allclose(result.auxiliary["Net rad. (W/m²)"].dropna(), 0.8 * rad.dropna())

    def test_glorad(self, static_runner, observation_frame):
        """Global radiation is compared with daily mean observations."""
        simulated = pd.Series(250.0, index=pd.date_range("2014-06-01", periods=2, freq="D"))
        result = make_compare(static_runner("evap_portugal", simulated), observation_frame).run("glorad")

        assert len(result.observed) == 2
        assert result.observed.iloc[0] == pytest.approx(600.0 * 14 / 24)
        assert result.simulated_cumsum.iloc[-1] == pytest.approx(500.0)

    @pytest.mark.parametrize("variable, channel", [("rad_net", "rnet"), ("soilheat", "sheat")])
    def test_portugal_only(self, static_runner, simulated_series, observation_frame, variable, channel):
        """Net radiation and soil heat are compared in Portugal."""
        result = make_compare(static_runner("evap_portugal", simulated_series), observation_frame).run(variable)

        assert result.compared
        assert result.observed.equals(observation_frame[channel])

    def test_morocco_skips_rad_net(self, static_runner, simulated_series, observation_frame):
        """Morocco has no net radiation observations."""
        result = make_compare(static_runner("evap_morocco", simulated_series), observation_frame).run("rad_net")

        assert not result.compared
        assert result.result_mean == pytest.approx(0.1)

    def test_skip_engine_run(self, static_runner, simulated_series, observation_frame):
        """Existing output can be compared without running the engine."""
        runner = static_runner("evap_portugal", simulated_series)
        make_compare(runner, observation_frame).run("soilheat", execute=False)

        assert runner.calls == 0

    def test_empty_output(self, static_runner, observation_frame):
        """Test empty simulation raises EngineError."""
        from echse_et.utils.exceptions import EngineError

        empty = pd.Series([], index=pd.DatetimeIndex([]), dtype=float)
        with pytest.raises(EngineError):
            make_compare(static_runner("evap_portugal", empty), observation_frame).run("evap")

    def test_plots(self, static_runner, simulated_series, observation_frame, tmp_path):
        """Test figure names carry variable, region, site and period."""
        compare = make_compare(static_runner("evap_portugal", simulated_series), observation_frame,
                               plots=True, plot_dir=tmp_path)
        result = compare.run("soilheat")

        names = sorted(Path(p).name for p in result.plot_paths)
        assert names == [
            "plot_soilheat_compare_portugal_HS_2014-06-01_2014-06-02.pdf",
            "plot_soilheat_cum_portugal_HS_2014-06-01_2014-06-02.pdf",
        ]
        assert all(Path(p).exists() for p in result.plot_paths)

    def test_evap_panel_written(self, static_runner, simulated_series, observation_frame, tmp_path):
        """Test the evap comparison writes the driver panel."""
        compare = make_compare(static_runner("evap_portugal", simulated_series), observation_frame,
                               plots=True, plot_dir=tmp_path)

        result = compare.run("evap")

        assert len(result.plot_paths) == 2
        assert (tmp_path / "plot_evap_compare_portugal_HS_2014-06-01_2014-06-02.pdf").exists()
