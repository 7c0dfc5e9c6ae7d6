"""
Adapters - Store boundary implementations.
"""

from .json_store import JsonStore

__all__ = ["JsonStore"]
