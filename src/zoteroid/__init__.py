"""Zoteroid: import DOIs as structured literature notes."""

__version__ = "0.1.0"
