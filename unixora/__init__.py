"""Unixora: student assistant client core and auth service."""

__version__ = "1.0.0"
