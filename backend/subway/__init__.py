"""Subway line path and fare service."""

__version__ = "0.1.0"
