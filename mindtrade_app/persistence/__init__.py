"""
Local persistence for client-side state that outlives a process.
"""
from .local_store import LocalStore

__all__ = ["LocalStore"]
