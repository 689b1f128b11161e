"""
Auth API operations: local registration, local login and "who am I".
"""
from sqlalchemy.ext.asyncio import AsyncSession

from atlasstudio.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from atlasstudio.logging_config import get_logger
from atlasstudio.models.user import LOCAL_PROVIDER, User
from atlasstudio.metrics import track_login, track_registration
from atlasstudio.schemas import LocalIdentity, OAuth2Identity
from atlasstudio.services.password_service import MAX_PASSWORD_BYTES, PasswordService, password_service
from atlasstudio.services.user_service import UserService


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class AuthService:
    """Service implementing the auth endpoints on top of the user store."""

    def __init__(self, db: AsyncSession, passwords: PasswordService | None = None):
        self.db = db
        self.users = UserService(db)
        self.passwords = passwords or password_service

    async def register(self, email: str | None, password: str | None, name: str | None) -> User:
        """
        Create a local account.

        Args:
            email: Login email, also used as provider_id
            password: Plaintext password, stored hashed
            name: Display name (optional)

        Returns:
            Newly created User

        Raises:
            ValidationError: email or password missing/blank, or password too long
            ConflictError: a user with that email already exists
        """
        if _is_blank(email) or _is_blank(password):
            track_registration("invalid")
            raise ValidationError("Email and password are required")

        if self.passwords.is_too_long(password):
            track_registration("invalid")
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        log = get_logger(email=email)

        if await self.users.get_by_email(email) is not None:
            log.info("registration_conflict")
            track_registration("conflict")
            raise ConflictError("Email already in use")

        user = User(
            provider=LOCAL_PROVIDER,
            provider_id=email,
            email=email,
            name=name,
            password_hash=self.passwords.hash(password),
        )
        try:
            user = await self.users.save(user)
        except ConflictError:
            # Lost a race with a concurrent registration
            log.info("registration_conflict")
            track_registration("conflict")
            raise

        log.info("user_registered", user_id=user.id)
        track_registration("created")
        return user

    async def authenticate(self, username: str | None, password: str | None) -> User:
        """
        Check local credentials.

        Raises:
            ValidationError: username or password missing/blank
            UnauthorizedError: unknown user, non-local account, wrong or over-long password
        """
        if _is_blank(username) or _is_blank(password):
            raise ValidationError("Email and password are required")

        user = await self.users.get_by_provider_and_provider_id(LOCAL_PROVIDER, username)
        if user is None or not self.passwords.verify(password, user.password_hash):
            get_logger(email=username).info("local_login_failed")
            track_login(LOCAL_PROVIDER, "failure")
            raise UnauthorizedError("Invalid credentials")

        get_logger(user_id=user.id, email=username).info("local_login_succeeded")
        track_login(LOCAL_PROVIDER, "success")
        return user

    async def who_am_i(self, identity: LocalIdentity | OAuth2Identity | None) -> User:
        """
        Resolve the user record behind the current identity.

        OAuth2 identities are looked up by (provider, subject) and the user is
        created from the identity's claims if the record is missing. Local
        identities are looked up by email among local accounts.

        Raises:
            UnauthorizedError: no identity
            NotFoundError: local identity without a matching record
        """
        if identity is None:
            raise UnauthorizedError()

        if isinstance(identity, OAuth2Identity):
            user = await self.users.get_by_provider_and_provider_id(
                identity.provider, identity.subject
            )
            if user is not None:
                return user

            user = await self.users.upsert_oauth_user(
                provider=identity.provider,
                provider_id=identity.subject,
                email=identity.claim("email"),
                name=identity.claim("name"),
                avatar_url=identity.claim("picture"),
            )
            get_logger(user_id=user.id, provider=identity.provider).info("whoami_created_user")
            return user

        if isinstance(identity, LocalIdentity):
            # Local accounts carry their email as provider_id
            user = await self.users.get_by_provider_and_provider_id(LOCAL_PROVIDER, identity.email)
            if user is None:
                raise NotFoundError("User not found")
            return user

        raise UnauthorizedError()
