"""Runner for the external ECHSE simulation engines.

An engine lives in ``<projects_dir>/<engine>/run`` and is started with a
runner script and a configuration name; its result is a tab-separated table
with an ``end_of_interval`` timestamp column.
"""

import shlex
import subprocess
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ..config.settings import DEFAULT_DELIMITER, ENGINE
from ..utils.exceptions import EngineError
from ..utils.logger import Logger


class EngineRunner:
    """
    Run an ECHSE engine and read back its output.

    Attributes:
        engine: Name of the engine (e.g. ``evap_portugal``)
        run_dir: Directory the runner is executed in
        runner: Runner command, relative to ``run_dir``
        config_name: Configuration passed to the runner
        output_path: Path of the result table

    Example:
        >>> runner = EngineRunner("~/uni/projects", "evap_portugal")
        >>> runner.run()
        >>> result = runner.read_output()
    """

    def __init__(
        self,
        projects_dir: Union[str, Path],
        engine: str,
        config_name: str = ENGINE["config_name"],
        runner: str = ENGINE["runner"],
        output_file: str = ENGINE["output_file"],
        time_column: str = ENGINE["time_column"],
        sep: str = DEFAULT_DELIMITER
    ):
        self.engine = engine
        self.run_dir = Path(projects_dir).expanduser() / engine / "run"
        self.runner = runner
        self.config_name = config_name
        self.output_path = self.run_dir / output_file
        self.time_column = time_column
        self.sep = sep

    @property
    def region(self) -> str:
        """Region suffix of the engine name (``evap_portugal`` -> ``portugal``)."""
        return self.engine.rsplit("_", 1)[-1]

    @property
    def command(self) -> str:
        """Shell command executed by :meth:`run`."""
        return f"cd {shlex.quote(str(self.run_dir))}; {self.runner} {self.config_name}"

    def run(self, timeout: Optional[float] = None) -> subprocess.CompletedProcess:
        """
        Execute the engine.

        Args:
            timeout: Optional timeout in seconds

        Returns:
            Completed process

        Raises:
            EngineError: If the run directory is missing or the runner fails
        """
        if not self.run_dir.is_dir():
            raise EngineError(f"Engine run directory not found: {self.run_dir}", engine=self.engine)

        Logger.info(f"Running engine {self.engine}: {self.command}")
        try:
            completed = subprocess.run(
                self.command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired as e:
            raise EngineError(f"Engine {self.engine} timed out after {timeout}s", engine=self.engine) from e

        if completed.returncode != 0:
            Logger.error(completed.stderr.strip() or completed.stdout.strip())
            raise EngineError(
                f"Engine {self.engine} failed with exit code {completed.returncode}",
                engine=self.engine,
                returncode=completed.returncode
            )

        Logger.debug(completed.stdout.strip())
        return completed

    def read_output(self) -> pd.Series:
        """
        Read the engine's result table.

        Returns:
            Series of the first value column indexed by ``end_of_interval``

        Raises:
            EngineError: If the output is missing or malformed
        """
        if not self.output_path.exists():
            raise EngineError(f"Engine output not found: {self.output_path}", engine=self.engine)

        try:
            table = pd.read_csv(self.output_path, sep=self.sep)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise EngineError(f"Failed to read engine output: {e}", engine=self.engine) from e

        if self.time_column not in table.columns:
            raise EngineError(
                f"Engine output lacks '{self.time_column}' column: {self.output_path}",
                engine=self.engine
            )

        value_columns = [c for c in table.columns if c != self.time_column]
        if not value_columns:
            raise EngineError(f"Engine output has no value column: {self.output_path}", engine=self.engine)

        try:
            index = pd.DatetimeIndex(pd.to_datetime(table[self.time_column]))
            values = pd.to_numeric(table[value_columns[0]]).to_numpy(dtype=float)
        except (ValueError, TypeError) as e:
            raise EngineError(f"Invalid engine output: {e}", engine=self.engine) from e

        result = pd.Series(values, index=index, name=value_columns[0])
        Logger.info(f"Read {len(result)} simulated values from {self.output_path}")
        return result


__all__ = ['EngineRunner']
