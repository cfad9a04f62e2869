"""Command-line interface for the ECHSE evapotranspiration tools."""

from echse_et.cli.interface import cli

__all__ = ['cli']
