from authlib.integrations.starlette_client import OAuthError
from sqlalchemy import select
from starlette.responses import RedirectResponse

from atlasstudio.config import settings
from atlasstudio.models.user import User
from atlasstudio.oauth import oauth


def fake_token(**userinfo):
    async def authorize_access_token(request, **kwargs):
        return {"access_token": "access", "token_type": "Bearer", "userinfo": userinfo}
    return authorize_access_token


async def test_authorize_redirects_with_callback_uri(client, monkeypatch):
    seen = {}

    async def authorize_redirect(request, redirect_uri, **kwargs):
        seen["redirect_uri"] = redirect_uri
        return RedirectResponse("https://accounts.example/auth", status_code=302)

    monkeypatch.setattr(oauth.google, "authorize_redirect", authorize_redirect)

    response = await client.get("/oauth2/authorization/google")

    assert response.status_code == 302
    assert response.headers["location"] == "https://accounts.example/auth"
    assert seen["redirect_uri"] == "http://testserver/login/oauth2/code/google"


async def test_unknown_provider_is_not_found(client):
    assert (await client.get("/oauth2/authorization/myspace")).status_code == 404
    assert (await client.get("/login/oauth2/code/myspace")).status_code == 404


async def test_callback_links_user_and_starts_session(client, session_factory, monkeypatch):
    monkeypatch.setattr(
        oauth.google,
        "authorize_access_token",
        fake_token(sub="123", email="b@x.com", name="Bee", picture="http://img/bee.png")
    )

    response = await client.get("/login/oauth2/code/google?code=abc&state=xyz")

    assert response.status_code == 303
    assert response.headers["location"] == settings.OAUTH2_SUCCESS_REDIRECT
    token = response.cookies.get(settings.SESSION_COOKIE_NAME)
    assert token

    me = await client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["provider"] == "google"
    assert me.json()["providerId"] == "123"
    assert me.json()["name"] == "Bee"


async def test_repeat_login_updates_same_record(client, session_factory, monkeypatch):
    monkeypatch.setattr(
        oauth.google, "authorize_access_token", fake_token(sub="123", email="b@x.com", name="Bee")
    )
    await client.get("/login/oauth2/code/google?code=abc")

    monkeypatch.setattr(
        oauth.google, "authorize_access_token", fake_token(sub="123", email="b@x.com", name="Bee2")
    )
    await client.get("/login/oauth2/code/google?code=def")

    async with session_factory() as session:
        users = (await session.execute(select(User))).scalars().all()

    assert len(users) == 1
    assert users[0].provider == "google"
    assert users[0].provider_id == "123"
    assert users[0].name == "Bee2"


async def test_failed_code_exchange_is_bad_request(client, session_factory, monkeypatch):
    async def authorize_access_token(request, **kwargs):
        raise OAuthError(error="access_denied", description="User denied access")

    monkeypatch.setattr(oauth.google, "authorize_access_token", authorize_access_token)

    response = await client.get("/login/oauth2/code/google?error=access_denied")

    assert response.status_code == 400
    assert response.json() == {"message": "Authentication with google failed"}
    assert settings.SESSION_COOKIE_NAME not in response.cookies


async def test_callback_without_subject_is_bad_request(client, monkeypatch):
    monkeypatch.setattr(oauth.google, "authorize_access_token", fake_token(email="b@x.com"))

    response = await client.get("/login/oauth2/code/google?code=abc")

    assert response.status_code == 400


async def test_failed_code_exchange_is_reported(client, monkeypatch):
    reported = []

    async def authorize_access_token(request, **kwargs):
        raise OAuthError(error="invalid_grant")

    monkeypatch.setattr(oauth.google, "authorize_access_token", authorize_access_token)
    monkeypatch.setattr(
        "atlasstudio.routes.auth.capture_message",
        lambda message, level="info": reported.append((message, level))
    )

    await client.get("/login/oauth2/code/google?code=stale")

    assert reported == [("OAuth2 code exchange failed for google: invalid_grant", "warning")]
