"""Identity provider boundary: verified user identity from JWTs."""

from betterdoc.core.auth.jwt import TokenError, decode_token
from betterdoc.core.auth.types import TokenPayload

__all__ = [
    "TokenError",
    "TokenPayload",
    "decode_token",
]
