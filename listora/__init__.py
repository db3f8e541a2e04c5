"""Listora marketplace publishing core."""

__version__ = "0.1.0"
