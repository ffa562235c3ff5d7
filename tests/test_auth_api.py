import pytest

from learnx.config import settings
from learnx.models import User
from learnx.security import decode_access_token

SIGNUP = {
    "userid": "jdoe",
    "name": "Jane Doe",
    "email": "Jane@Example.com",
    "password": "s3cret",
    "role": "student",
}


@pytest.mark.asyncio
async def test_signup(client, session):
    response = await client.post("/auth/signup", json=SIGNUP)

    assert response.status_code == 201
    user = response.json()["user"]
    assert user["userid"] == "jdoe"
    assert user["email"] == "jane@example.com"
    assert "password_hash" not in user

    stored = session.query(User).filter_by(userid="jdoe").one()
    assert stored.password_hash != "s3cret"
    assert stored.check_password("s3cret")


@pytest.mark.asyncio
async def test_signup_duplicate_userid(client):
    await client.post("/auth/signup", json=SIGNUP)

    response = await client.post("/auth/signup", json={**SIGNUP, "email": "other@example.com"})

    assert response.status_code == 409
    assert response.json() == {"message": "User ID already taken."}


@pytest.mark.asyncio
async def test_signup_duplicate_email(client):
    await client.post("/auth/signup", json=SIGNUP)

    response = await client.post("/auth/signup", json={**SIGNUP, "userid": "jdoe2"})

    assert response.status_code == 409
    assert response.json() == {"message": "Email already in use."}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"password": ""}, "userid, name, email, password and role are required."),
        ({"userid": "   "}, "userid, name, email, password and role are required."),
        ({"role": "superuser"}, "Invalid role."),
    ],
)
async def test_signup_invalid(client, session, overrides, message):
    response = await client.post("/auth/signup", json={**SIGNUP, **overrides})

    assert response.status_code == 400
    assert response.json() == {"message": message}
    assert session.query(User).count() == 0


@pytest.mark.asyncio
async def test_login_sets_cookie_and_returns_token(client, make_user):
    make_user("jdoe", password="s3cret")

    response = await client.post(
        "/auth/login", json={"userid": "jdoe", "password": "s3cret", "role": "student"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["userid"] == "jdoe"
    assert body["token_type"] == "bearer"
    assert decode_access_token(body["access_token"])["sub"] == "jdoe"

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{settings.AUTH_COOKIE_NAME}=")
    assert "httponly" in set_cookie.lower()


@pytest.mark.asyncio
async def test_login_wrong_password(client, make_user):
    make_user("jdoe", password="s3cret")

    response = await client.post(
        "/auth/login", json={"userid": "jdoe", "password": "nope", "role": "student"}
    )

    assert response.status_code == 401
    assert response.json() == {"message": "Incorrect password. Please try again."}


@pytest.mark.asyncio
async def test_login_unknown_user(client):
    response = await client.post(
        "/auth/login", json={"userid": "ghost", "password": "x", "role": "student"}
    )

    assert response.status_code == 404
    assert response.json() == {"message": "Account not found. Please sign up first."}


@pytest.mark.asyncio
async def test_login_role_mismatch(client, make_user):
    make_user("teach", role="instructor", password="s3cret")

    response = await client.post(
        "/auth/login", json={"userid": "teach", "password": "s3cret", "role": "student"}
    )

    assert response.status_code == 401
    assert response.json()["message"].endswith("instructor")


@pytest.mark.asyncio
async def test_login_missing_fields(client):
    response = await client.post("/auth/login", json={"userid": "jdoe"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_logout_clears_cookie(client):
    response = await client.post("/auth/logout")

    assert response.status_code == 204
    assert response.headers["set-cookie"].startswith(f"{settings.AUTH_COOKIE_NAME}=")


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/health")
    assert response.json() == {"status": "ok"}
