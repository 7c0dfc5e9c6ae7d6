"""
Cronos - availability resolution and appointment slot scheduling.
"""

__version__ = "0.1.0"
