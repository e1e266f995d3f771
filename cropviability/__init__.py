"""Crop viability API — checks crop growth phases against historical temperatures."""

__version__ = "0.1.0"
