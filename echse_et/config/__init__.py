"""Configuration module for the ECHSE evapotranspiration tools."""

from .settings import load_config

__all__ = ['load_config']
