"""
ResourcePulse Backend - Auth Endpoint Tests
===========================================

What we test:
    - Self-registration is limited to the `user` role
    - Admins can create accounts with elevated roles
    - Login, refresh and /me
    - Error responses share the {"error", "message"} shape
"""


async def test_register_and_login(test_client):
    response = await test_client.post(
        "/api/auth/register",
        json={"email": "New.User@Example.com", "password": "long-enough-pw"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "new.user@example.com"
    assert body["role"] == "user"
    assert "password_hash" not in body

    response = await test_client.post(
        "/api/auth/login",
        json={"email": "new.user@example.com", "password": "long-enough-pw"},
    )
    assert response.status_code == 200
    tokens = response.json()
    assert tokens["token_type"] == "bearer"
    assert tokens["user"]["last_login"] is not None

    me = await test_client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["email"] == "new.user@example.com"


async def test_duplicate_email_conflicts(test_client, make_user):
    await make_user("user", email="taken@example.com")
    response = await test_client.post(
        "/api/auth/register", json={"email": "taken@example.com", "password": "long-enough-pw"}
    )
    assert response.status_code == 409
    assert response.json()["error"] == "conflict"


async def test_anonymous_cannot_register_elevated_role(test_client):
    response = await test_client.post(
        "/api/auth/register",
        json={"email": "boss@example.com", "password": "long-enough-pw", "role": "admin"},
    )
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


async def test_admin_can_register_manager(test_client, admin_headers):
    response = await test_client.post(
        "/api/auth/register",
        json={"email": "rm@example.com", "password": "long-enough-pw", "role": "resource_manager"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["role"] == "resource_manager"


async def test_short_password_is_schema_error(test_client):
    response = await test_client.post(
        "/api/auth/register", json={"email": "a@example.com", "password": "short"}
    )
    assert response.status_code == 422


async def test_login_wrong_password(test_client, make_user):
    await make_user("user", email="someone@example.com")
    response = await test_client.post(
        "/api/auth/login", json={"email": "someone@example.com", "password": "nope-nope"}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


async def test_login_unknown_email_has_same_message(test_client):
    response = await test_client.post(
        "/api/auth/login", json={"email": "ghost@example.com", "password": "nope-nope"}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


async def test_login_deactivated(test_client, make_user, user_password):
    await make_user("user", email="gone@example.com", is_active=False)
    response = await test_client.post(
        "/api/auth/login", json={"email": "gone@example.com", "password": user_password}
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Account is deactivated"


async def test_refresh_issues_access_token(test_client, make_user, user_password):
    await make_user("user", email="fresh@example.com")
    login = await test_client.post(
        "/api/auth/login", json={"email": "fresh@example.com", "password": user_password}
    )
    refresh_token = login.json()["refresh_token"]

    response = await test_client.post("/api/auth/refresh", json={"refresh_token": refresh_token})
    assert response.status_code == 200
    access = response.json()["access_token"]
    me = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert me.status_code == 200


async def test_refresh_rejects_access_token(test_client, admin_user, headers_for):
    access = headers_for(admin_user)["Authorization"].split(" ", 1)[1]
    response = await test_client.post("/api/auth/refresh", json={"refresh_token": access})
    assert response.status_code == 401


async def test_me_without_token(test_client):
    response = await test_client.get("/api/auth/me")
    assert response.status_code == 401
    body = response.json()
    assert body["error"] == "unauthorized"
    assert body["message"] == "Access denied. No token provided"


async def test_token_for_deactivated_user_is_rejected(test_client, make_user, headers_for):
    user = await make_user("user", is_active=False)
    response = await test_client.get("/api/auth/me", headers=headers_for(user))
    assert response.status_code == 401
    assert response.json()["message"] == "Account is deactivated"


async def test_api_reads_require_login(test_client):
    response = await test_client.get("/api/projects")
    assert response.status_code == 401


async def test_plain_user_cannot_mutate(test_client, user_headers):
    response = await test_client.post(
        "/api/projects", json={"name": "X", "client": "Y"}, headers=user_headers
    )
    assert response.status_code == 403
    assert "admin" in response.json()["details"]["required_roles"]
