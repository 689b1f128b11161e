"""
JWT session token service.

The token carries the authenticated identity (local or OAuth2) and is
stored in the session cookie or sent as a Bearer token.
"""
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from atlasstudio.config import settings
from atlasstudio.schemas import LocalIdentity, OAuth2Identity, identity_adapter


class JWTService:
    """Service for creating and verifying session tokens."""

    def __init__(self, secret_key: str | None = None, algorithm: str | None = None):
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM

    def create_token(
        self,
        identity: LocalIdentity | OAuth2Identity,
        expires_delta: timedelta | None = None
    ) -> str:
        """
        Create a JWT token for an identity.

        Args:
            identity: The authenticated identity to embed
            expires_delta: Lifetime override (default: JWT_EXPIRATION_MINUTES)

        Returns:
            Encoded JWT token string
        """
        expires = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
        )

        payload = {
            "sub": identity.principal,
            "identity": identity.model_dump(),
            "exp": expires
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> LocalIdentity | OAuth2Identity | None:
        """
        Verify a JWT token and rebuild the identity it carries.

        Returns:
            The identity, or None if the token is invalid, expired or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm]
            )
            return identity_adapter.validate_python(payload.get("identity"))
        except (JWTError, PydanticValidationError):
            return None
