"""
User model.

A user is owned by exactly one authentication provider: "local" for
password accounts, or the name of an OAuth2 identity provider.
"""
from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from atlasstudio.models.base import Base, TimestampMixin

LOCAL_PROVIDER = "local"


class User(Base, TimestampMixin):
    """
    User record keyed by (provider, provider_id).

    Local accounts store their email as provider_id, so the composite
    constraint also keeps local emails unique.
    """
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("provider", "provider_id", name="uq_users_provider_provider_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    provider: Mapped[str] = mapped_column(String(32), nullable=False)
    provider_id: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, provider={self.provider}, provider_id={self.provider_id}, email={self.email})>"
