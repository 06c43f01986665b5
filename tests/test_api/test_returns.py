"""API tests for /api/returns and the assignment return shortcut."""


def _item(client, code):
    return client.post("/api/items", json={"code": code, "name": code}).json()["id"]


def _item_status(client, item_id):
    return client.get(f"/api/items/{item_id}").json()["status"]


def _assign(client, item_id, **extra):
    res = client.post("/api/assignments", json={"item_id": item_id, "user_id": 2, **extra})
    assert res.status_code == 201
    return res.json()


def _return(client, assignment_id, condition="good", **extra):
    res = client.post("/api/returns", json={
        "assignment_id": assignment_id, "condition_on_return": condition, **extra,
    })
    assert res.status_code == 201
    return res.json()


def test_damaged_return_flow(client):
    item_id = _item(client, "R-001")
    ret = _return(client, _assign(client, item_id)["id"], "damaged", damage_description="Cracked screen")
    assert ret["status"] == "pending_inspection"
    assert ret["is_damaged"] is True
    assert ret["item_id"] == item_id
    assert _item_status(client, item_id) == "available"

    res = client.post(f"/api/returns/{ret['id']}/inspect", json={"inspection_notes": "Confirmed"})
    assert res.json()["status"] == "inspected"
    res = client.post(f"/api/returns/{ret['id']}/approve")
    assert res.json()["status"] == "approved"
    assert _item_status(client, item_id) == "damaged"


def test_assignment_return_endpoint_records_a_return(client):
    item_id = _item(client, "R-002")
    a = _assign(client, item_id)
    res = client.post(f"/api/assignments/{a['id']}/return", json={"condition_on_return": "damaged"})
    assert res.status_code == 200
    assert res.json()["status"] == "returned"

    pending = client.get("/api/returns/pending-inspection").json()
    assert [r["assignment_id"] for r in pending] == [a["id"]]
    client.post(f"/api/returns/{pending[0]['id']}/inspect", json={})
    client.post(f"/api/returns/{pending[0]['id']}/approve")
    assert _item_status(client, item_id) == "damaged"


def test_quick_return_good_condition(client):
    item_id = _item(client, "R-003")
    a = _assign(client, item_id)
    res = client.post(f"/api/returns/quick/{a['id']}", json={"condition": "good"})
    assert res.status_code == 201
    assert res.json()["status"] == "approved"
    assert _item_status(client, item_id) == "available"


def test_inspect_twice_conflict(client):
    ret = _return(client, _assign(client, _item(client, "R-004"))["id"])
    assert client.post(f"/api/returns/{ret['id']}/inspect", json={}).status_code == 200
    assert client.post(f"/api/returns/{ret['id']}/inspect", json={}).status_code == 409


def test_approve_before_inspection_conflict(client):
    ret = _return(client, _assign(client, _item(client, "R-005"))["id"])
    assert client.post(f"/api/returns/{ret['id']}/approve").status_code == 409


def test_second_return_conflict(client):
    a = _assign(client, _item(client, "R-006"))
    _return(client, a["id"])
    res = client.post("/api/returns", json={"assignment_id": a["id"], "condition_on_return": "good"})
    assert res.status_code == 409


def test_reject_requires_reason(client):
    ret = _return(client, _assign(client, _item(client, "R-007"))["id"])
    assert client.post(f"/api/returns/{ret['id']}/reject", json={"reason": ""}).status_code == 422
    res = client.post(f"/api/returns/{ret['id']}/reject", json={"reason": "Not our unit"})
    assert res.json()["status"] == "rejected"


def test_late_return_penalty(client):
    a = _assign(client, _item(client, "R-008"), assigned_date="2024-01-02", due_date="2024-02-01")
    ret = _return(client, a["id"], return_date="2024-02-05")
    assert ret["is_late"] is True
    assert ret["days_late"] == 4

    res = client.post(f"/api/returns/{ret['id']}/penalty", json={"per_day": "2.50"})
    assert float(res.json()["penalty_amount"]) == 10.0
    assert client.get("/api/returns/late").json()[0]["id"] == ret["id"]
    assert client.post(f"/api/returns/{ret['id']}/penalty/paid").json()["penalty_paid"] is True


def test_list_and_stats(client):
    _return(client, _assign(client, _item(client, "R-009"))["id"], "damaged")
    _return(client, _assign(client, _item(client, "R-010"))["id"])

    assert client.get("/api/returns").json()["total"] == 2
    assert client.get("/api/returns?damaged=true").json()["total"] == 1
    assert client.get("/api/returns?user_id=2").json()["total"] == 2
    stats = client.get("/api/returns/stats").json()
    assert stats["total"] == 2
    assert stats["damaged"] == 1
    assert stats["pending_inspection"] == 2


def test_unknown_return(client):
    assert client.get("/api/returns/999").status_code == 404
