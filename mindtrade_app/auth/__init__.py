"""
Authentication: bearer token storage and the sign-in/out flow.
"""
from .token_store import TokenStore

__all__ = ["TokenStore"]
