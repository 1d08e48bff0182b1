"""Fuzzy show-name matching and catalog maintenance tools."""

__version__ = "0.1.0"
