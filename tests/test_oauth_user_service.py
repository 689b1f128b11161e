from sqlalchemy import func, select

import pytest

from atlasstudio.errors import ValidationError
from atlasstudio.models.user import User
from atlasstudio.schemas import OAuth2Identity
from atlasstudio.services.oauth_user_service import OAuthUserService
from atlasstudio.services.user_service import UserService

CLAIMS = {
    "sub": "123",
    "email": "b@x.com",
    "name": "Bee",
    "picture": "http://img/bee.png",
    "email_verified": True,
}


async def test_first_login_creates_linked_user(db):
    identity = await OAuthUserService(db).load_user("google", CLAIMS)

    assert isinstance(identity, OAuth2Identity)
    assert identity.provider == "google"
    assert identity.subject == "123"
    assert identity.claims == {
        "sub": "123",
        "email": "b@x.com",
        "name": "Bee",
        "picture": "http://img/bee.png",
    }

    user = await UserService(db).get_by_provider_and_provider_id("google", "123")
    assert user.email == "b@x.com"
    assert user.name == "Bee"
    assert user.avatar_url == "http://img/bee.png"
    assert user.password_hash is None


async def test_second_login_reuses_record_and_refreshes_profile(db):
    bridge = OAuthUserService(db)
    await bridge.load_user("google", CLAIMS)
    first = await UserService(db).get_by_provider_and_provider_id("google", "123")
    first_id = first.id

    await bridge.load_user("google", {**CLAIMS, "name": "Bee2", "picture": "http://img/bee2.png"})

    user = await UserService(db).get_by_provider_and_provider_id("google", "123")
    assert user.id == first_id
    assert user.name == "Bee2"
    assert user.avatar_url == "http://img/bee2.png"

    count = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    assert count == 1


async def test_missing_subject_is_rejected(db):
    with pytest.raises(ValidationError):
        await OAuthUserService(db).load_user("google", {"email": "b@x.com"})

    count = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    assert count == 0
