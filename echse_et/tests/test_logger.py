"""
Unit tests for the logging utilities of the ECHSE ET tools.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def records():
    """Collect emitted loguru records."""
    from loguru import logger

    collected = []
    sink_id = logger.add(lambda message: collected.append(message.record), level="DEBUG")
    yield collected
    logger.remove(sink_id)


class TestLogStep:
    """Test the step context manager."""

    def test_completed(self, records):
        """Test start and completion are logged."""
        from echse_et.utils.logger import log_step

        with log_step("Estimating alb"):
            pass

        messages = [r["message"] for r in records]
        assert messages == ["Starting: Estimating alb", "[COMPLETED] Estimating alb"]

    def test_scope_tags_records(self, records):
        """Test records inside the step carry its scope."""
        from echse_et.utils.logger import DEFAULT_SCOPE, Logger, log_step

        with log_step("Estimating radex", scope="radex"):
            Logger.info("inside")
        Logger.info("outside")

        scopes = {r["message"]: r["extra"]["scope"] for r in records}
        assert scopes["inside"] == "radex"
        assert scopes["outside"] == DEFAULT_SCOPE

    def test_context_added_to_error(self, records):
        """Test keyword context is attached to failing ECHSE errors."""
        from echse_et.utils.exceptions import EmptySelectionError
        from echse_et.utils.logger import log_step

        with pytest.raises(EmptySelectionError) as exc_info:
            with log_step("Estimating alb", parname="alb", family="radex"):
                raise EmptySelectionError("No samples", family="alb")

        assert exc_info.value.details["parname"] == "alb"
        assert exc_info.value.details["family"] == "alb"
        assert "[FAILED] Estimating alb" in [r["message"] for r in records]
        assert "EmptySelectionError" in records[-1]["message"]

    def test_other_errors_propagate(self):
        """Test non-ECHSE errors are re-raised unchanged."""
        from echse_et.utils.logger import log_step

        with pytest.raises(KeyError):
            with log_step("Reading"):
                raise KeyError("rsd")


class TestSetup:
    """Test sink configuration."""

    def test_log_file(self, tmp_path):
        """Test records reach the log file with their scope."""
        from echse_et.utils.logger import Logger

        log_file = tmp_path / "logs" / "echse.log"
        Logger.setup(log_file=str(log_file), level="INFO", console=False)
        with Logger.scope("evap_portugal"):
            Logger.info("engine finished")
        Logger.configure_for_testing()

        content = log_file.read_text()
        assert "evap_portugal" in content
        assert "engine finished" in content
        assert Logger.level == "DEBUG"
