"""
User store.

Lookups by email and by (provider, provider_id), plain save, and the
atomic upsert used for OAuth2 logins. Uniqueness is enforced by the
uq_users_provider_provider_id constraint; violations surface as
ConflictError.
"""
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from atlasstudio.errors import ConflictError
from atlasstudio.models.user import User

_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class UserService:
    """Service for reading and writing user records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email, across all providers.

        Args:
            email: User email address

        Returns:
            User or None if not found
        """
        stmt = select(User).where(User.email == email).order_by(User.id).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_provider_and_provider_id(self, provider: str, provider_id: str) -> User | None:
        """
        Get user by its canonical key.

        Args:
            provider: "local" or an identity provider name
            provider_id: Email for local users, IdP subject otherwise

        Returns:
            User or None if not found
        """
        stmt = select(User).where(
            User.provider == provider,
            User.provider_id == provider_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def save(self, user: User) -> User:
        """
        Insert the user if it has no id yet, otherwise flush its changes.

        Raises:
            ConflictError: the write violated a uniqueness constraint
        """
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise ConflictError("Email already in use") from exc
        await self.db.refresh(user)
        return user

    async def upsert_oauth_user(
        self,
        provider: str,
        provider_id: str,
        email: str | None,
        name: str | None,
        avatar_url: str | None
    ) -> User:
        """
        Insert the user, or on (provider, provider_id) conflict refresh its profile.

        Runs as a single INSERT ... ON CONFLICT DO UPDATE so concurrent first
        logins for the same subject end up with one row. Existing rows keep
        their id and email; only name and avatar_url are overwritten.
        """
        dialect = self.db.get_bind().dialect.name
        try:
            insert = _UPSERT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Upsert is not supported on {dialect}") from None

        stmt = insert(User).values(
            provider=provider,
            provider_id=provider_id,
            email=email,
            name=name,
            avatar_url=avatar_url,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["provider", "provider_id"],
            set_={
                "name": stmt.excluded.name,
                "avatar_url": stmt.excluded.avatar_url,
                "updated_at": func.now(),
            },
        ).returning(User)

        result = await self.db.scalars(stmt, execution_options={"populate_existing": True})
        user = result.one()
        await self.db.commit()
        return user
