"""Output module for the ECHSE evapotranspiration tools.

This module provides the diagnostic and comparison figures.
"""

from echse_et.output.visualization import DiagnosticPlots

__all__ = ['DiagnosticPlots']
