"""API tests for /api/assignments."""
from datetime import date, timedelta


def _item(client, code):
    return client.post("/api/items", json={"code": code, "name": code}).json()["id"]


def _item_status(client, item_id):
    return client.get(f"/api/items/{item_id}").json()["status"]


def _assign(client, item_id, user_id=2, **extra):
    res = client.post("/api/assignments", json={"item_id": item_id, "user_id": user_id, **extra})
    assert res.status_code == 201
    return res.json()


def test_create_active_assignment(client):
    item_id = _item(client, "A-001")
    data = _assign(client, item_id, purpose="Remote work")
    assert data["status"] == "active"
    assert data["condition_on_assignment"] == "good"
    assert data["is_overdue"] is False
    assert _item_status(client, item_id) == "assigned"


def test_second_active_assignment_conflict(client):
    item_id = _item(client, "A-002")
    _assign(client, item_id)
    res = client.post("/api/assignments", json={"item_id": item_id, "user_id": 1})
    assert res.status_code == 409


def test_create_for_unknown_user(client):
    item_id = _item(client, "A-003")
    res = client.post("/api/assignments", json={"item_id": item_id, "user_id": 999})
    assert res.status_code == 404


def test_pending_approve_activate(client):
    item_id = _item(client, "A-004")
    a = _assign(client, item_id, status="pending")
    assert _item_status(client, item_id) == "available"

    assert client.post(f"/api/assignments/{a['id']}/approve").json()["status"] == "approved"
    assert client.post(f"/api/assignments/{a['id']}/approve").status_code == 409
    assert client.post(f"/api/assignments/{a['id']}/activate").json()["status"] == "active"
    assert _item_status(client, item_id) == "assigned"


def test_return_assignment(client):
    item_id = _item(client, "A-005")
    a = _assign(client, item_id)
    res = client.post(f"/api/assignments/{a['id']}/return", json={"condition_on_return": "fair"})
    assert res.status_code == 200
    assert res.json()["status"] == "returned"
    assert res.json()["returned_date"] is not None
    item = client.get(f"/api/items/{item_id}").json()
    assert item["status"] == "available"
    assert item["condition"] == "fair"


def test_cancel_assignment(client):
    item_id = _item(client, "A-006")
    a = _assign(client, item_id)
    assert client.post(f"/api/assignments/{a['id']}/cancel").json()["status"] == "cancelled"
    assert _item_status(client, item_id) == "available"
    assert client.post(f"/api/assignments/{a['id']}/cancel").status_code == 409


def test_soft_delete_releases_item(client):
    item_id = _item(client, "A-007")
    a = _assign(client, item_id)
    assert client.delete(f"/api/assignments/{a['id']}").status_code == 204
    assert client.get(f"/api/assignments/{a['id']}").status_code == 404
    assert _item_status(client, item_id) == "available"


def test_hard_delete_leaves_item(client):
    item_id = _item(client, "A-008")
    a = _assign(client, item_id)
    assert client.delete(f"/api/assignments/{a['id']}?hard=true").status_code == 204
    assert _item_status(client, item_id) == "assigned"


def test_overdue_and_summary(client):
    past = (date.today() - timedelta(days=5)).isoformat()
    _assign(client, _item(client, "A-009"), due_date=past)
    _assign(client, _item(client, "A-010"), status="pending")

    overdue = client.get("/api/assignments/overdue").json()
    assert len(overdue) == 1
    assert overdue[0]["is_overdue"] is True

    summary = client.get("/api/assignments/summary").json()
    assert summary == {"total": 2, "active": 1, "returned": 0, "overdue": 1, "pending": 1, "cancelled": 0}


def test_user_assignment_stats(client):
    _assign(client, _item(client, "A-011"))
    res = client.get("/api/users/2/assignment-stats")
    assert res.status_code == 200
    assert res.json()["active"] == 1


def test_list_filter_by_status(client):
    _assign(client, _item(client, "A-012"))
    _assign(client, _item(client, "A-013"), status="pending")
    res = client.get("/api/assignments?status=pending")
    assert res.json()["total"] == 1


def test_update_rejects_null_status(client):
    item_id = _item(client, "A-014")
    a = _assign(client, item_id)
    res = client.put(f"/api/assignments/{a['id']}", json={"status": None})
    assert res.status_code == 422
    assert client.get(f"/api/assignments/{a['id']}").json()["status"] == "active"
    assert _item_status(client, item_id) == "assigned"


def test_update_without_status_keeps_it(client):
    a = _assign(client, _item(client, "A-015"))
    res = client.put(f"/api/assignments/{a['id']}", json={"purpose": "Conference"})
    assert res.status_code == 200
    assert res.json()["status"] == "active"
    assert res.json()["purpose"] == "Conference"
