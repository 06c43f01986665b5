"""API tests for /api/auth and /api/users."""


def test_me(client):
    res = client.get("/api/auth/me")
    assert res.status_code == 200
    assert res.json()["username"] == "admin"
    assert res.json()["role"] == "admin"


def test_wrong_password(client):
    res = client.post("/api/auth/login", data={"username": "admin", "password": "nope"})
    assert res.status_code == 401


def test_logout(client):
    assert client.post("/api/auth/logout").status_code == 204
    assert client.get("/api/auth/me").status_code == 401
    assert client.post("/api/items", json={"code": "X", "name": "X"}).status_code == 401


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200


def test_security_headers(client):
    res = client.get("/api/health")
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["X-Frame-Options"] == "DENY"


def test_create_user(client):
    res = client.post("/api/users", json={
        "username": "mreyes", "email": "mreyes@example.com", "password": "changeme123", "role": "manager",
    })
    assert res.status_code == 201
    assert res.json()["role"] == "manager"
    assert "hashed_password" not in res.json()


def test_create_user_duplicate(client):
    res = client.post("/api/users", json={
        "username": "viewer", "email": "other@example.com", "password": "changeme123",
    })
    assert res.status_code == 409


def test_users_admin_only(client):
    client.post("/api/auth/login", data={"username": "viewer", "password": "viewer123"})
    assert client.get("/api/users").status_code == 403
