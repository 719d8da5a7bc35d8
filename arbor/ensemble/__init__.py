"""
Ensemble module initialization.
"""

from .forest import RandomForest

__all__ = ["RandomForest"]
