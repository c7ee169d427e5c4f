import pytest
from tests.helpers import auth_headers, create_user, url_prefix

REGISTER = {
    "email": "New.User@Example.com",
    "password": "secret123",
    "first_name": "Nadia",
    "last_name": "Islam",
    "phone": "01900000000",
}


@pytest.mark.asyncio
async def test_register_then_login(ac_client, outbox):
    resp = await ac_client.post(f"{url_prefix}/auth/register", json=REGISTER)
    assert resp.status_code == 201, resp.text
    user = resp.json()["data"]["user"]
    assert user["email"] == "new.user@example.com"
    assert user["role"] == "user"
    assert "password_hash" not in user

    assert [m["to"] for m in outbox.sent_emails] == ["new.user@example.com"]

    resp = await ac_client.post(f"{url_prefix}/auth/login", json={"email": "NEW.USER@example.com", "password": "secret123"})
    assert resp.status_code == 200, resp.text
    token = resp.json()["data"]["token"]

    resp = await ac_client.get(f"{url_prefix}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["data"]["first_name"] == "Nadia"


@pytest.mark.asyncio
async def test_duplicate_registration(ac_client):
    await create_user(email="new.user@example.com")
    resp = await ac_client.post(f"{url_prefix}/auth/register", json=REGISTER)
    assert resp.status_code == 409
    assert resp.json() == {"success": False, "error": "Email already registered"}


@pytest.mark.asyncio
async def test_register_rejects_short_password(ac_client):
    resp = await ac_client.post(f"{url_prefix}/auth/register", json={**REGISTER, "password": "123"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_welcome_email_failure_does_not_block_registration(ac_client, outbox):
    outbox.should_fail = True
    resp = await ac_client.post(f"{url_prefix}/auth/register", json=REGISTER)
    assert resp.status_code == 201, resp.text


@pytest.mark.asyncio
async def test_bad_credentials(ac_client):
    await create_user(email="known@example.com", password="secret123")

    for creds in ({"email": "known@example.com", "password": "wrong-pass"},
                  {"email": "nobody@example.com", "password": "secret123"}):
        resp = await ac_client.post(f"{url_prefix}/auth/login", json=creds)
        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_me_requires_token_and_ignores_garbage(ac_client):
    resp = await ac_client.get(f"{url_prefix}/auth/me")
    assert resp.status_code == 401

    resp = await ac_client.get(f"{url_prefix}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_auth_cookie(ac_client):
    resp = await ac_client.post(f"{url_prefix}/auth/logout")
    assert resp.status_code == 200
    assert any(c.startswith("auth_token=") and "Max-Age=0" in c for c in resp.headers.get_list("set-cookie"))


@pytest.mark.asyncio
async def test_auth_cookie_is_accepted(ac_client):
    user = await create_user(email="cookie@example.com")
    token = auth_headers(user)["Authorization"].split(" ", 1)[1]
    resp = await ac_client.get(f"{url_prefix}/auth/me", headers={"Cookie": f"auth_token={token}"})
    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == "cookie@example.com"


@pytest.mark.asyncio
async def test_profile_update_and_email_collision(ac_client):
    user = await create_user(email="me@example.com")
    await create_user(email="taken@example.com")
    headers = auth_headers(user)

    resp = await ac_client.put(f"{url_prefix}/users/profile", json={"email": "taken@example.com"}, headers=headers)
    assert resp.status_code == 409
    assert resp.json()["error"] == "Email already in use"

    resp = await ac_client.put(f"{url_prefix}/users/profile", json={}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "No updates provided"

    resp = await ac_client.put(f"{url_prefix}/users/profile", json={"first_name": "Renamed", "phone": "01700000001"},
                               headers=headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["first_name"] == "Renamed"
    assert resp.json()["data"]["phone"] == "01700000001"


@pytest.mark.asyncio
async def test_change_password(ac_client):
    user = await create_user(email="pw@example.com", password="secret123")
    headers = auth_headers(user)
    url = f"{url_prefix}/users/password"

    resp = await ac_client.put(url, json={"currentPassword": "secret123"}, headers=headers)
    assert resp.json()["error"] == "All fields are required"

    resp = await ac_client.put(url, json={"currentPassword": "secret123", "newPassword": "abcdef",
                                          "confirmPassword": "abcdeg"}, headers=headers)
    assert resp.json()["error"] == "New passwords do not match"

    resp = await ac_client.put(url, json={"currentPassword": "secret123", "newPassword": "abc",
                                          "confirmPassword": "abc"}, headers=headers)
    assert resp.json()["error"] == "Password must be at least 6 characters"

    resp = await ac_client.put(url, json={"currentPassword": "wrong", "newPassword": "newsecret",
                                          "confirmPassword": "newsecret"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Current password is incorrect"

    resp = await ac_client.put(url, json={"currentPassword": "secret123", "newPassword": "newsecret",
                                          "confirmPassword": "newsecret"}, headers=headers)
    assert resp.status_code == 200, resp.text

    resp = await ac_client.post(f"{url_prefix}/auth/login", json={"email": "pw@example.com", "password": "newsecret"})
    assert resp.status_code == 200
