"""
Backend API clients, one per endpoint group.
"""
from .client import ApiClient

__all__ = ["ApiClient"]
