"""Lint rule for records that mix public and non-public fields."""

__version__ = "0.1.0"
