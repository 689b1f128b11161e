"""
Request/response schemas and the authenticated identity types.
"""
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class RegisterRequest(BaseModel):
    """Local registration body. Blank checks happen in AuthService."""
    email: str | None = None
    password: str | None = None
    name: str | None = None


class UserResponse(BaseModel):
    """Public view of a user. The password hash is never part of it."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    provider: str
    provider_id: str
    email: str | None = None
    name: str | None = None
    avatar_url: str | None = None


class LocalIdentity(BaseModel):
    """A session established with email and password."""
    kind: Literal["local"] = "local"
    email: str

    @property
    def principal(self) -> str:
        return self.email


class OAuth2Identity(BaseModel):
    """
    A session established through an OAuth2 identity provider.

    Keyed by the provider's subject ("sub") claim; the full claim set
    {sub, email, name, picture} is carried along.
    """
    kind: Literal["oauth2"] = "oauth2"
    provider: str
    subject: str
    claims: dict[str, Any] = Field(default_factory=dict)

    @property
    def principal(self) -> str:
        return self.subject

    def claim(self, key: str) -> Any:
        return self.claims.get(key)


AuthenticatedIdentity = Annotated[
    Union[LocalIdentity, OAuth2Identity],
    Field(discriminator="kind")
]

identity_adapter = TypeAdapter(AuthenticatedIdentity)
