"""
OAuth2 identity bridge.

Runs right after a successful OAuth2 handshake: links the provider's
subject to a local user record and hands back the identity that the
session layer stores.
"""
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from atlasstudio.errors import ValidationError
from atlasstudio.logging_config import get_logger
from atlasstudio.metrics import track_login
from atlasstudio.schemas import OAuth2Identity
from atlasstudio.services.user_service import UserService

# Claims consumed from the identity provider
CLAIM_KEYS = ("sub", "email", "name", "picture")


class OAuthUserService:
    """Finds or creates the user linked to an OAuth2 subject."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserService(db)

    async def load_user(self, provider: str, claims: Mapping[str, Any]) -> OAuth2Identity:
        """
        Upsert the user for (provider, sub) and return its identity.

        Name and avatar are overwritten on every login so profile changes at
        the provider propagate; email is only set when the row is created.

        Args:
            provider: Registration name of the identity provider (e.g. "google")
            claims: Userinfo claims from the provider

        Returns:
            OAuth2Identity keyed by the "sub" claim

        Raises:
            ValidationError: the claims carry no subject
        """
        subject = claims.get("sub")
        if not subject:
            track_login(provider, "failure")
            raise ValidationError(f"No subject returned by {provider}")
        subject = str(subject)

        user = await self.users.upsert_oauth_user(
            provider=provider,
            provider_id=subject,
            email=claims.get("email"),
            name=claims.get("name"),
            avatar_url=claims.get("picture"),
        )

        get_logger(user_id=user.id, provider=provider).info("oauth_user_linked")
        track_login(provider, "success")

        return OAuth2Identity(
            provider=provider,
            subject=subject,
            claims={key: claims.get(key) for key in CLAIM_KEYS if key in claims},
        )
