"""Reusable board block and content order helpers."""

__version__ = "1.0.0"
