"""
Authentication dependencies for FastAPI.

Resolves the request's identity from the session cookie or a Bearer
token and passes it to handlers as an ordinary argument.
"""
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from atlasstudio.config import settings
from atlasstudio.schemas import LocalIdentity, OAuth2Identity
from atlasstudio.services.jwt_service import JWTService


# Security scheme; missing header is not an error here
security = HTTPBearer(auto_error=False)


async def get_optional_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security)
) -> LocalIdentity | OAuth2Identity | None:
    """
    Dependency returning the authenticated identity, or None.

    The Bearer header wins over the session cookie when both are sent.
    An invalid or expired token yields None.
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None

    identity = JWTService().verify_token(token)
    if identity is not None:
        request.state.identity_kind = identity.kind
        request.state.principal = identity.principal
    return identity

