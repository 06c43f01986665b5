"""API tests for /api/maintenances."""


def _item(client, code):
    return client.post("/api/items", json={"code": code, "name": code}).json()["id"]


def _item_json(client, item_id):
    return client.get(f"/api/items/{item_id}").json()


def _maintain(client, item_id, **extra):
    res = client.post("/api/maintenances", json={"item_id": item_id, "title": "Service", **extra})
    assert res.status_code == 201
    return res.json()


def test_create_scheduled_claims_item(client):
    item_id = _item(client, "M-001")
    m = _maintain(client, item_id, priority="high", estimated_cost="100.00")
    assert m["status"] == "scheduled"
    assert m["item_condition_before"] == "good"
    assert _item_json(client, item_id)["status"] == "under_maintenance"


def test_start_and_complete(client):
    item_id = _item(client, "M-002")
    m = _maintain(client, item_id, status="pending")
    assert _item_json(client, item_id)["status"] == "available"

    res = client.post(f"/api/maintenances/{m['id']}/start")
    assert res.json()["status"] == "in_progress"
    assert _item_json(client, item_id)["status"] == "under_maintenance"

    res = client.post(f"/api/maintenances/{m['id']}/complete",
                      json={"action_taken": "Replaced fan", "actual_cost": "80.00"})
    assert res.status_code == 200
    assert res.json()["status"] == "completed"
    assert res.json()["completed_at"] is not None
    assert _item_json(client, item_id)["status"] == "available"


def test_complete_with_damage(client):
    item_id = _item(client, "M-003")
    m = _maintain(client, item_id)
    client.post(f"/api/maintenances/{m['id']}/complete", json={"condition_after": "damaged"})
    item = _item_json(client, item_id)
    assert item["status"] == "damaged"
    assert item["condition"] == "damaged"


def test_complete_closed_maintenance_conflict(client):
    m = _maintain(client, _item(client, "M-004"))
    client.post(f"/api/maintenances/{m['id']}/cancel")
    res = client.post(f"/api/maintenances/{m['id']}/complete", json={})
    assert res.status_code == 409


def test_cancel_restores_item(client):
    item_id = _item(client, "M-005")
    m = _maintain(client, item_id)
    assert client.post(f"/api/maintenances/{m['id']}/cancel").json()["status"] == "cancelled"
    assert _item_json(client, item_id)["status"] == "available"


def test_maintenance_for_lost_item_conflict(client):
    item_id = _item(client, "M-006")
    client.post(f"/api/items/{item_id}/lost")
    res = client.post("/api/maintenances", json={"item_id": item_id, "title": "Service"})
    assert res.status_code == 409


def test_soft_delete(client):
    item_id = _item(client, "M-007")
    m = _maintain(client, item_id)
    assert client.delete(f"/api/maintenances/{m['id']}").status_code == 204
    assert client.get(f"/api/maintenances/{m['id']}").status_code == 404
    assert _item_json(client, item_id)["status"] == "available"


def test_list_filters(client):
    _maintain(client, _item(client, "M-008"), priority="critical")
    _maintain(client, _item(client, "M-009"), status="pending")
    assert client.get("/api/maintenances").json()["total"] == 2
    assert client.get("/api/maintenances?priority=critical").json()["total"] == 1
    assert client.get("/api/maintenances?status=pending").json()["total"] == 1


def test_update_rejects_null_status(client):
    item_id = _item(client, "M-020")
    m = _maintain(client, item_id)
    res = client.put(f"/api/maintenances/{m['id']}", json={"status": None})
    assert res.status_code == 422
    assert client.get(f"/api/maintenances/{m['id']}").json()["status"] == "scheduled"
    assert _item_json(client, item_id)["status"] == "under_maintenance"


def test_update_rejects_null_title(client):
    m = _maintain(client, _item(client, "M-021"))
    assert client.put(f"/api/maintenances/{m['id']}", json={"title": None}).status_code == 422
