"""JWT authentication middleware."""

from dataclasses import dataclass
from uuid import UUID

import structlog
from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from betterdoc.core.auth.jwt import TokenError, decode_token
from betterdoc.core.invites import VerifiedIdentity

logger = structlog.get_logger()

# Use Bearer token authentication
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class IdentityContext:
    """Identity asserted by a verified JWT."""

    user_id: UUID
    email: str
    email_verified: bool

    def to_verified_identity(self) -> VerifiedIdentity:
        """Identity for invite acceptance.

        An unverified address is never trusted, so it is replaced with an
        empty string that matches no email invite.
        """
        return VerifiedIdentity(
            user_id=self.user_id,
            email=self.email if self.email_verified else "",
        )


async def verify_jwt(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),  # noqa: B008
) -> IdentityContext:
    """Verify JWT token and return identity context.

    Args:
        request: The current request.
        credentials: Bearer token credentials.

    Returns:
        IdentityContext with user id and email.

    Raises:
        HTTPException: 401 if token is missing or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(credentials.credentials)
        user_id = UUID(payload.sub)
    except (TokenError, ValueError) as e:
        logger.warning(f"jwt_validation_failed: {e}")
        raise HTTPException(
            status_code=401,
            detail=str(e) if isinstance(e, TokenError) else "Invalid token subject",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    context = IdentityContext(
        user_id=user_id,
        email=payload.email,
        email_verified=payload.email_verified,
    )

    # Store in request state for downstream use
    request.state.user = context

    logger.debug(f"jwt_verified: user_id={context.user_id}")

    return context
