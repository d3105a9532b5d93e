"""
Palette Engine Colors Module

Provides the color model, pixel sampling, deterministic k-means clustering
and result assembly behind dominant-color extraction.
"""

__version__ = "1.0.0"
