"""Beacon localization simulation: duty-cycled observers, global resolver."""

__version__ = "0.1.0"
