"""
Dispatching resolved requests, singly or pooled.
"""

from .dispatcher import RequestDispatcher
from .pool import Pool

__all__ = ["RequestDispatcher", "Pool"]
