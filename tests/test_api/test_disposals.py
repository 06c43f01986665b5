"""API tests for POST /api/items/{id}/dispose and /api/disposals."""


def _create_item(client, code="DISP-T001", name="Test Item"):
    res = client.post("/api/items", json={"code": code, "name": name})
    assert res.status_code == 201
    return res.json()["id"]


def _request(client, item_id, **payload):
    res = client.post(f"/api/items/{item_id}/dispose", json={"reason": "liquidation", **payload})
    assert res.status_code == 201
    return res.json()


def test_request_disposal(client):
    """A request is pending and parks the item in pending_disposal."""
    item_id = _create_item(client)
    data = _request(client, item_id, note="Broken screen", document_ref="LIQ-2024-001")
    assert data["item_id"] == item_id
    assert data["status"] == "pending"
    assert data["document_ref"] == "LIQ-2024-001"
    assert data["requested_by"] == 1
    assert client.get(f"/api/items/{item_id}").json()["status"] == "pending_disposal"


def test_request_disposal_invalid_reason(client):
    item_id = _create_item(client, code="DISP-T002")
    res = client.post(f"/api/items/{item_id}/dispose", json={"reason": "lost_in_space"})
    assert res.status_code == 422


def test_request_disposal_item_not_found(client):
    res = client.post("/api/items/99999/dispose", json={"reason": "sale"})
    assert res.status_code == 404


def test_duplicate_request_conflict(client):
    item_id = _create_item(client, code="DISP-T003")
    _request(client, item_id)
    res = client.post(f"/api/items/{item_id}/dispose", json={"reason": "sale"})
    assert res.status_code == 409


def test_approve_and_execute(client):
    item_id = _create_item(client, code="DISP-T004")
    disposal = _request(client, item_id)

    res = client.post(f"/api/disposals/{disposal['id']}/approve", json={"note": "Approved by board"})
    assert res.status_code == 200
    assert res.json()["status"] == "approved"

    res = client.post(f"/api/disposals/{disposal['id']}/execute", json={"disposal_cost": "25.00"})
    assert res.status_code == 200
    assert res.json()["status"] == "executed"
    assert res.json()["executed_at"] is not None

    item = client.get(f"/api/items/{item_id}").json()
    assert item["status"] == "disposed"
    assert item["is_active"] is False


def test_execute_without_approval_conflict(client):
    item_id = _create_item(client, code="DISP-T005")
    disposal = _request(client, item_id)
    res = client.post(f"/api/disposals/{disposal['id']}/execute")
    assert res.status_code == 409


def test_reject(client):
    item_id = _create_item(client, code="DISP-T006")
    disposal = _request(client, item_id)
    res = client.post(f"/api/disposals/{disposal['id']}/reject")
    assert res.status_code == 200
    assert res.json()["status"] == "rejected"
    assert client.get(f"/api/items/{item_id}").json()["status"] == "available"


def test_list_disposals(client):
    _request(client, _create_item(client, code="DISP-L001"))
    _request(client, _create_item(client, code="DISP-L002"), reason="sale")
    res = client.get("/api/disposals")
    assert res.status_code == 200
    data = res.json()
    assert data["total"] == 2
    assert {d["item_code"] for d in data["items"]} == {"DISP-L001", "DISP-L002"}


def test_list_disposals_filter_by_reason(client):
    _request(client, _create_item(client, code="DISP-F001"))
    _request(client, _create_item(client, code="DISP-F002"), reason="donation")
    res = client.get("/api/disposals?reason=donation")
    assert res.json()["total"] == 1
    assert res.json()["items"][0]["item_code"] == "DISP-F002"


def test_get_disposal_not_found(client):
    assert client.get("/api/disposals/99999").status_code == 404
