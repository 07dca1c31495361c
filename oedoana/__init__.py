"""Decoders, Brho reconstruction, hit processors, GET event assembly and analysis helpers for OEDO data."""

__version__ = "0.1.0"