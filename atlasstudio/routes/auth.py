"""
Authentication routes: local registration/login, OAuth2 login, logout.

A successful login of either kind stores a signed session token in the
auth cookie; /api/me reads it back.
"""
from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from atlasstudio.config import settings
from atlasstudio.database import get_db
from atlasstudio.errors import NotFoundError, ValidationError
from atlasstudio.logging_config import get_logger
from atlasstudio.oauth import get_client
from atlasstudio.metrics import track_login
from atlasstudio.schemas import LocalIdentity, OAuth2Identity, RegisterRequest, UserResponse
from atlasstudio.sentry_config import capture_message
from atlasstudio.services.auth_service import AuthService
from atlasstudio.services.jwt_service import JWTService
from atlasstudio.services.oauth_user_service import OAuthUserService

router = APIRouter(tags=["Authentication"])


def set_session_cookie(response: Response, identity: LocalIdentity | OAuth2Identity) -> None:
    """Issue a session token for identity and attach it as the auth cookie."""
    access_token = JWTService().create_token(identity)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        max_age=settings.JWT_EXPIRATION_MINUTES * 60
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax"
    )


def _client_or_404(provider: str):
    client = get_client(provider)
    if client is None:
        raise NotFoundError(f"Unknown identity provider: {provider}")
    return client


@router.post(
    "/api/auth/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED
)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a local account.

    Returns 201 with the created user, 400 if email or password is
    missing, 409 if the email is already in use.
    """
    user = await AuthService(db).register(
        email=request.email,
        password=request.password,
        name=request.name
    )
    return user


@router.post("/api/auth/login", response_model=UserResponse)
async def login(
    response: Response,
    username: str | None = Form(None),
    password: str | None = Form(None),
    db: AsyncSession = Depends(get_db)
):
    """
    Log in with email and password (form-encoded).

    Sets the session cookie on success.
    """
    user = await AuthService(db).authenticate(username, password)
    set_session_cookie(response, LocalIdentity(email=user.email))
    return user


@router.post("/api/auth/logout")
async def logout(response: Response):
    """Clear the session cookie."""
    clear_session_cookie(response)
    return {"status": "success", "message": "Logged out"}


@router.get("/logout")
async def logout_redirect():
    """Clear the session cookie and send the browser back to the login page."""
    response = RedirectResponse(
        url=f"{settings.FRONTEND_URL}/Login",
        status_code=status.HTTP_303_SEE_OTHER
    )
    clear_session_cookie(response)
    return response


@router.get("/oauth2/authorization/{provider}")
async def oauth2_authorize(provider: str, request: Request):
    """
    Redirect user to the identity provider's login page.
    """
    client = _client_or_404(provider)
    redirect_uri = str(request.url_for("oauth2_callback", provider=provider))
    return await client.authorize_redirect(request, redirect_uri)


@router.get("/login/oauth2/code/{provider}", name="oauth2_callback")
async def oauth2_callback(
    provider: str,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Handle the identity provider's callback (server-side flow).

    Exchanges the code, links the subject to a local user, stores the
    session cookie and redirects to the frontend.
    """
    client = _client_or_404(provider)

    try:
        token = await client.authorize_access_token(request)
    except OAuthError as e:
        get_logger(provider=provider).warning("oauth_exchange_failed", error=e.error)
        track_login(provider, "failure")
        capture_message(f"OAuth2 code exchange failed for {provider}: {e.error}", level="warning")
        raise ValidationError(f"Authentication with {provider} failed") from e

    claims = token.get("userinfo")
    if not claims:
        claims = await client.userinfo(token=token)

    identity = await OAuthUserService(db).load_user(provider, claims)

    response = RedirectResponse(
        url=settings.OAUTH2_SUCCESS_REDIRECT,
        status_code=status.HTTP_303_SEE_OTHER
    )
    set_session_cookie(response, identity)
    return response
