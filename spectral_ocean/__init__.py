"""Spectral (Tessendorf) ocean wave synthesizer."""

__version__ = "0.1.0"
