"""
Faith Activity Statistics

Period-aligned time-series aggregation over personal activity logs.
"""

__version__ = "0.1.0"
