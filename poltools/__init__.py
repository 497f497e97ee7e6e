"""Readers and writers for Polanie's game data containers."""

__version__ = "0.3.0"
