"""
Unit tests for exceptions module of the ECHSE ET tools.

Tests custom exception hierarchy and utilities.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))


class TestECHSEError:
    """Test base ECHSE exception."""

    def test_error_creation(self):
        """Test ECHSEError creation."""
        from echse_et.utils.exceptions import ECHSEError

        error = ECHSEError("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"

    def test_error_with_details(self):
        """Test ECHSEError with details."""
        from echse_et.utils.exceptions import ECHSEError

        error = ECHSEError("Test error", details={"key": "value"})

        assert error.details["key"] == "value"
        assert str(error) == "Test error | Details: {'key': 'value'}"

    def test_error_add_detail(self):
        """Test adding details to error."""
        from echse_et.utils.exceptions import ECHSEError

        error = ECHSEError("Test error")
        error.add_detail("family", "radex")

        assert error.details["family"] == "radex"


class TestConfigurationError:
    """Test ConfigurationError and subclasses."""

    def test_config_param(self):
        """Test configuration parameter is recorded."""
        from echse_et.utils.exceptions import ConfigurationError

        error = ConfigurationError("Missing value", config_param="radex_a")

        assert error.details["parameter"] == "radex_a"

    def test_unknown_parameter(self):
        """Test UnknownParameterError is a ConfigurationError."""
        from echse_et.utils.exceptions import ConfigurationError, UnknownParameterError

        error = UnknownParameterError("Unknown", parname="xyz")

        assert isinstance(error, ConfigurationError)
        assert error.details["parameter"] == "xyz"

    def test_missing_source(self):
        """Test MissingSourceError records the variable."""
        from echse_et.utils.exceptions import ConfigurationError, MissingSourceError

        error = MissingSourceError("No source", variable="rsu")

        assert isinstance(error, ConfigurationError)
        assert error.details["variable"] == "rsu"


class TestDataInputError:
    """Test DataInputError and subclasses."""

    def test_data_input_error(self):
        """Test DataInputError creation."""
        from echse_et.utils.exceptions import DataInputError

        error = DataInputError("Invalid data", input_type="observations", file_path="/data/rsd.dat")

        assert error.details["input_type"] == "observations"
        assert error.details["file_path"] == "/data/rsd.dat"

    def test_time_series_read_error(self):
        """Test TimeSeriesReadError creation."""
        from echse_et.utils.exceptions import DataInputError, TimeSeriesReadError

        error = TimeSeriesReadError("Unreadable", file_path="/data/rsd.dat")

        assert isinstance(error, DataInputError)
        assert error.details["input_type"] == "timeseries"

    def test_empty_selection_error(self):
        """Test EmptySelectionError records the family."""
        from echse_et.utils.exceptions import EmptySelectionError

        error = EmptySelectionError("Nothing left", family="alb")

        assert error.details["family"] == "alb"
        assert error.details["input_type"] == "estimation_dataset"


class TestOtherErrors:
    """Test estimation, engine and output errors."""

    def test_engine_error(self):
        """Test EngineError records engine and exit code."""
        from echse_et.utils.exceptions import EngineError

        error = EngineError("Failed", engine="evap_portugal", returncode=0)

        assert error.details == {"engine": "evap_portugal", "returncode": 0}

    def test_visualization_error(self):
        """Test VisualizationError is an OutputError."""
        from echse_et.utils.exceptions import OutputError, VisualizationError

        error = VisualizationError("Cannot save", plot_type="plot_alb.pdf", output_path="/fig/plot_alb.pdf")

        assert isinstance(error, OutputError)
        assert error.details["output_type"] == "visualization"
        assert error.details["plot_type"] == "plot_alb.pdf"

    def test_all_derive_from_base(self):
        """Test every custom exception can be caught as ECHSEError."""
        from echse_et.utils import exceptions

        for name in ("ConfigurationError", "DataInputError", "EstimationError", "EngineError", "OutputError"):
            assert issubclass(getattr(exceptions, name), exceptions.ECHSEError)


class TestErrorContext:
    """Test error context utility."""

    def test_create_error_context(self):
        """Test context dictionary creation."""
        from echse_et.utils.exceptions import EstimationError, create_error_context

        error = EstimationError("Singular fit", family="fcorr")
        context = create_error_context(error, {"parname": "fcorr_a"})

        assert context["error_type"] == "EstimationError"
        assert context["error_details"] == {"family": "fcorr"}
        assert context["additional_context"]["parname"] == "fcorr_a"

    def test_raise_and_catch(self):
        """Test raising through the hierarchy."""
        from echse_et.utils.exceptions import ECHSEError, EmptySelectionError

        with pytest.raises(ECHSEError):
            raise EmptySelectionError("No samples", family="radex")
