def test_dashboard_counts(client):
    item_id = client.post("/api/items", json={"code": "D-001", "name": "Desk"}).json()["id"]
    client.post("/api/items", json={"code": "D-002", "name": "Lamp"})
    client.post("/api/assignments", json={"item_id": item_id, "user_id": 2})
    client.post("/api/requests", json={"type": "purchase", "title": "Chairs", "priority": "urgent"})

    data = client.get("/api/dashboard").json()
    assert data["items"]["total"] == 2
    assert data["items"]["by_status"]["assigned"] == 1
    assert data["items"]["by_status"]["available"] == 1
    assert data["assignments"]["active"] == 1
    assert data["requests"]["high_priority"] == 1
    assert data["returns"]["total"] == 0


def test_dashboard_managers_only(client):
    client.post("/api/auth/login", data={"username": "viewer", "password": "viewer123"})
    assert client.get("/api/dashboard").status_code == 403
