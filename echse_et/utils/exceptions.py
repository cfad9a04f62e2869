"""
Custom exceptions for the ECHSE evapotranspiration tools.

Provides a hierarchical exception system so callers can tell configuration
mistakes, bad input data and external-process failures apart.
"""


class ECHSEError(Exception):
    """
    Base exception for ECHSE tool errors.

    All custom exceptions inherit from this class.
    Carries a message and a dictionary of details about the failure.
    """

    def __init__(self, message: str, details: dict = None, *args):
        super().__init__(message, *args)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def add_detail(self, key: str, value) -> None:
        """
        Add detail information to the exception.

        Args:
            key: Detail key
            value: Detail value
        """
        self.details[key] = value


class ConfigurationError(ECHSEError):
    """
    Exception raised for configuration errors.

    This includes:
    - Unknown parameter family or emissivity method
    - Missing configuration parameters (radex_a, radex_b, ...)
    - Unreadable configuration files
    """

    def __init__(self, message: str, config_param: str = None, details: dict = None, *args):
        details = dict(details or {})
        if config_param:
            details["parameter"] = config_param
        super().__init__(message, details, *args)


class UnknownParameterError(ConfigurationError):
    """
    Exception raised when a parameter name matches no estimation family.
    """

    def __init__(self, message: str, parname: str = None, *args):
        super().__init__(message, config_param=parname, *args)


class MissingSourceError(ConfigurationError):
    """
    Exception raised when a variable required by a family has no data source.
    """

    def __init__(self, message: str, variable: str = None, *args):
        details = {}
        if variable:
            details["variable"] = variable
        super().__init__(message, details=details, *args)


class DataInputError(ECHSEError):
    """
    Exception raised for invalid input data.

    This includes:
    - Missing or corrupted input files
    - Invalid data format
    - Empty selections after filtering
    """

    def __init__(self, message: str, input_type: str = None, file_path: str = None,
                 details: dict = None, *args):
        details = dict(details or {})
        if input_type:
            details["input_type"] = input_type
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, details, *args)


class TimeSeriesReadError(DataInputError):
    """
    Exception raised when a time-series file cannot be read or parsed.
    """

    def __init__(self, message: str, file_path: str = None, *args):
        super().__init__(message, input_type="timeseries", file_path=file_path, *args)


class EmptySelectionError(DataInputError):
    """
    Exception raised when a validity mask selects no samples.
    """

    def __init__(self, message: str, family: str = None, *args):
        details = {}
        if family:
            details["family"] = family
        super().__init__(message, input_type="estimation_dataset", details=details, *args)


class EstimationError(ECHSEError):
    """
    Exception raised for numerical failures during parameter estimation.
    """

    def __init__(self, message: str, family: str = None, *args):
        details = {}
        if family:
            details["family"] = family
        super().__init__(message, details, *args)


class EngineError(ECHSEError):
    """
    Exception raised when the ECHSE engine fails or its output is unreadable.
    """

    def __init__(self, message: str, engine: str = None, returncode: int = None, *args):
        details = {}
        if engine:
            details["engine"] = engine
        if returncode is not None:
            details["returncode"] = returncode
        super().__init__(message, details, *args)


class OutputError(ECHSEError):
    """
    Exception raised for output file errors.
    """

    def __init__(self, message: str, output_path: str = None, output_type: str = None,
                 details: dict = None, *args):
        details = dict(details or {})
        if output_path:
            details["output_path"] = output_path
        if output_type:
            details["output_type"] = output_type
        super().__init__(message, details, *args)


class VisualizationError(OutputError):
    """
    Exception raised for diagnostic plot failures.
    """

    def __init__(self, message: str, plot_type: str = None, output_path: str = None, *args):
        details = {}
        if plot_type:
            details["plot_type"] = plot_type
        super().__init__(message, output_path=output_path, output_type="visualization",
                         details=details, *args)


def create_error_context(error: Exception, context: dict) -> dict:
    """
    Create a comprehensive error context dictionary.

    Args:
        error: The exception that occurred
        context: Additional context information

    Returns:
        Dictionary with error details
    """
    context_data = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if hasattr(error, 'details'):
        context_data["error_details"] = error.details

    if context:
        context_data["additional_context"] = context

    return context_data
