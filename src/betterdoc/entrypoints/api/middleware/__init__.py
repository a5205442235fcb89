"""API middleware."""

from betterdoc.entrypoints.api.middleware.jwt_auth import IdentityContext, verify_jwt

__all__ = ["IdentityContext", "verify_jwt"]
