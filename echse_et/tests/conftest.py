"""
Pytest configuration and fixtures for ECHSE ET tools tests.

Provides synthetic observation series, files written to tmp_path and a
stub engine.
"""

import stat
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))


def write_series(path: Path, series: pd.Series, column: str = "value") -> Path:
    """Write a series as a tab-separated two-column text file."""
    lines = [f"date\t{column}"]
    lines += [f"{ts:%Y-%m-%d %H:%M:%S}\t{value}" for ts, value in series.items()]
    path.write_text("\n".join(lines) + "\n")
    return path


def write_engine(projects_dir: Path, engine: str, rows, exit_code: int = 0) -> Path:
    """Create a stub engine whose runner writes a fixed result table."""
    run_dir = projects_dir / engine / "run"
    run_dir.mkdir(parents=True)
    table = "end_of_interval\\tetr\\n" + "".join(f"{ts}\\t{value}\\n" for ts, value in rows)
    script = run_dir / "run"
    script.write_text(
        "#!/bin/sh\n"
        "mkdir -p out\n"
        f"printf '{table}' > out/test1.txt\n"
        f"exit {exit_code}\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return run_dir


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep loguru quiet during tests."""
    from echse_et.utils.logger import Logger

    Logger.configure_for_testing()
    yield
    Logger.configure_for_testing()


@pytest.fixture
def hourly_index():
    """Ten days of hourly timestamps in early June."""
    return pd.date_range("2014-06-01 00:00", periods=24 * 10, freq="h")


@pytest.fixture
def albedo_frame(hourly_index):
    """rsd = 500, rsu = 50 at every hour."""
    return pd.DataFrame(
        {"rsd": np.full(len(hourly_index), 500.0), "rsu": np.full(len(hourly_index), 50.0)},
        index=hourly_index
    )


@pytest.fixture
def radex_frame(hourly_index):
    """Extraterrestrial radiation in daylight and a varying transmission ratio."""
    hours = hourly_index.hour
    rx = np.where((hours >= 6) & (hours <= 18), 1000.0, 0.0)
    rng = np.random.default_rng(42)
    ratio = rng.uniform(0.3, 0.8, len(hourly_index))
    return pd.DataFrame({"rx": rx, "rsd": ratio * rx}, index=hourly_index)


@pytest.fixture
def longwave_frame(radex_frame):
    """All variables needed by the fcorr and emis families."""
    rng = np.random.default_rng(7)
    n = len(radex_frame)
    frame = radex_frame.copy()
    frame["ta"] = rng.uniform(15.0, 25.0, n)
    frame["hr"] = rng.uniform(40.0, 80.0, n)
    frame["rld"] = rng.uniform(300.0, 340.0, n)
    frame["rlu"] = rng.uniform(380.0, 420.0, n)
    return frame[["ta", "hr", "rld", "rlu", "rsd", "rx"]]


@pytest.fixture
def soil_heat_frame(hourly_index):
    """sheat is 10 % of rnet between 06 and 19 h and 50 % otherwise."""
    hours = hourly_index.hour
    day = (hours >= 6) & (hours <= 19)
    rnet = np.where(day, 400.0, -50.0)
    sheat = np.where(day, 0.1, 0.5) * rnet
    return pd.DataFrame({"rnet": rnet, "sheat": sheat}, index=hourly_index)


@pytest.fixture
def subhourly_series():
    """Ten-minute samples from 00:00 to 03:50; value = minute of day."""
    index = pd.date_range("2014-06-01 00:00", "2014-06-01 03:50", freq="10min")
    return pd.Series(np.arange(0, 240, 10, dtype=float), index=index)


@pytest.fixture
def albedo_files(tmp_path, albedo_frame):
    """rsd as hourly text file, rsu as pickled ten-minute series."""
    rsd = write_series(tmp_path / "rsd.dat", albedo_frame["rsd"])

    index = pd.date_range(albedo_frame.index[0], albedo_frame.index[-1], freq="10min")
    rsu = tmp_path / "rsu_10min.pkl"
    pd.Series(50.0, index=index).to_pickle(rsu)
    return {"rsd": rsd, "rsu": rsu}


@pytest.fixture
def observation_frame():
    """Two days of Portugal field observations."""
    index = pd.date_range("2014-06-01 00:00", "2014-06-02 23:00", freq="h")
    n = len(index)
    et = pd.Series(0.05, index=index)
    et.iloc[5] = np.nan
    return pd.DataFrame(
        {
            "rsd": np.where(np.isin(index.hour, range(6, 20)), 600.0, 0.0),
            "ta": np.linspace(15.0, 25.0, n),
            "rnet": np.full(n, 200.0),
            "sheat": np.full(n, 20.0),
            "soil_moisture": np.full(n, 0.25),
            "hr": np.full(n, 60.0),
            "wind": np.full(n, 2.0),
            "et": et.values,
        },
        index=index
    )


@pytest.fixture
def simulated_series():
    """Hourly simulated ET of 0.1 mm over two days."""
    index = pd.date_range("2014-06-01 01:00", "2014-06-02 23:00", freq="h")
    return pd.Series(0.1, index=index, name="etr")


class StaticRunner:
    """Engine stand-in returning a fixed simulation."""

    def __init__(self, engine: str, result: pd.Series):
        self.engine = engine
        self.result = result
        self.output_path = Path("out") / "test1.txt"
        self.calls = 0

    @property
    def region(self) -> str:
        return self.engine.rsplit("_", 1)[-1]

    def run(self):
        self.calls += 1

    def read_output(self) -> pd.Series:
        return self.result


@pytest.fixture
def static_runner():
    return StaticRunner


@pytest.fixture
def series_writer():
    return write_series


@pytest.fixture
def engine_factory():
    return write_engine
