"""
API routes for the authenticated user.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from atlasstudio.database import get_db
from atlasstudio.dependencies.auth import get_optional_identity
from atlasstudio.schemas import LocalIdentity, OAuth2Identity, UserResponse
from atlasstudio.services.auth_service import AuthService

router = APIRouter(prefix="/api", tags=["API"])


@router.get("/me", response_model=UserResponse)
async def me(
    identity: LocalIdentity | OAuth2Identity | None = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db)
):
    """
    Return the authenticated user's profile.

    401 without a valid session. OAuth2 users missing a record get one
    created from their token claims; local users missing a record get 404.
    """
    return await AuthService(db).who_am_i(identity)
