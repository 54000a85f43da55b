"""Authentication for the remote replica."""

from .provider import AuthProvider, StaticAuthProvider, TokenFileAuthProvider

__all__ = ["AuthProvider", "StaticAuthProvider", "TokenFileAuthProvider"]
