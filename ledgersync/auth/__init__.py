from .session import AuthenticatedUser, AuthProvider, SessionAuthProvider

__all__ = ["AuthenticatedUser", "AuthProvider", "SessionAuthProvider"]
